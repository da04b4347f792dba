"""
Use Case: Scan Document.

Orquestra: OCR → Validação do tipo → Extração de campos → Resultado
Mede latência de cada etapa. Nenhuma exceção escapa para o chamador.
"""

import logging
import time
import uuid
from typing import Any

from idscan.core.entities.fields import FieldSpec
from idscan.core.entities.scan_result import DOCUMENT_TYPE_MISMATCH, DocumentScanResult
from idscan.core.interfaces.document_validator import IDocumentValidator
from idscan.core.interfaces.field_extractor import IFieldExtractor
from idscan.core.interfaces.ocr_engine import IOCREngine
from idscan.infrastructure.extraction.dates import DateUsageScope

logger = logging.getLogger(__name__)


def _elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 2)


class ScanDocumentUseCase:
    """
    Use Case: recebe imagem → roda pipeline → retorna DocumentScanResult.

    Dependency Injection: todas as dependências vêm pelo construtor.
    """

    def __init__(
        self,
        ocr_engine: IOCREngine,
        validator: IDocumentValidator,
        extractor: IFieldExtractor,
    ):
        self._ocr = ocr_engine
        self._validator = validator
        self._extractor = extractor

    def execute(
        self,
        image: Any,
        keywords: list[str] | tuple[str, ...],
        field_specs: list[FieldSpec] | tuple[FieldSpec, ...],
        document_id: str | None = None,
    ) -> DocumentScanResult:
        """
        Executa o pipeline completo.

        1. OCR — uma única vez por imagem
        2. Validação — vocabulário do tipo de documento
        3. Extração — um FieldResult por spec, escopo de datas novo
        4. Consolida resultado
        """
        doc_id = document_id or str(uuid.uuid4())
        stage_latencies: dict[str, float] = {}
        t_start = time.perf_counter()

        def meta() -> dict:
            return {
                "document_id": doc_id,
                "stage_latencies": stage_latencies,
                "total_latency_ms": _elapsed_ms(t_start),
            }

        try:
            # ── 1. OCR ─────────────────────────────────────────
            t0 = time.perf_counter()
            text = self._ocr.recognize(image)
            stage_latencies["ocr_ms"] = _elapsed_ms(t0)

            # ── 2. Validação ───────────────────────────────────
            t0 = time.perf_counter()
            valid = self._validator.validate(text, keywords)
            stage_latencies["validate_ms"] = _elapsed_ms(t0)

            if not valid:
                logger.info(f"[{doc_id}] Rejected: {DOCUMENT_TYPE_MISMATCH}")
                return DocumentScanResult.invalid(DOCUMENT_TYPE_MISMATCH, **meta())

            # ── 3. Extração ────────────────────────────────────
            t0 = time.perf_counter()
            extraction = self._extractor.extract(text, field_specs, DateUsageScope(document_id=doc_id))
            stage_latencies["extract_ms"] = _elapsed_ms(t0)

        except Exception as e:
            logger.warning(f"[{doc_id}] Scan failed: {e}")
            return DocumentScanResult.invalid(f"Error scanning document: {e}", **meta())

        found = sum(1 for f in extraction.fields if f.found)
        logger.info(f"[{doc_id}] Scan OK: {found}/{len(extraction.fields)} fields found")
        return DocumentScanResult(is_valid=True, fields=extraction.fields, **meta())
