"""
Entity: Document Scan Result

Resultado consolidado de um scan (OCR + validação + extração).
Imutável após a construção; pertence ao orquestrador até ser entregue
ao chamador.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from idscan.core.entities.fields import FieldResult

DOCUMENT_TYPE_MISMATCH = "Document does not match expected type"


@dataclass(frozen=True)
class DocumentScanResult:
    """Resultado de um scan de documento."""
    is_valid: bool
    fields: tuple[FieldResult, ...] = ()
    error_message: str | None = None

    # Meta
    document_id: str = ""
    total_latency_ms: float = 0.0
    stage_latencies: dict = field(default_factory=dict)  # {"ocr_ms": 120.3, "validate_ms": 0.2, ...}
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def invalid(cls, message: str, **meta) -> "DocumentScanResult":
        return cls(is_valid=False, fields=(), error_message=message, **meta)

    def get(self, key: str) -> FieldResult | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def to_dict(self) -> dict:
        """Mapa plano: isValid, errorMessage e um par chave → valor por campo."""
        result = {
            "isValid": self.is_valid,
            "errorMessage": self.error_message,
        }
        for f in self.fields:
            result[f.key] = f.value
        return result

    def as_payload(self) -> dict:
        """Forma detalhada (usada pela API)."""
        return {
            "document_id": self.document_id,
            "is_valid": self.is_valid,
            "error_message": self.error_message,
            "fields": [f.to_dict() for f in self.fields],
            "total_latency_ms": self.total_latency_ms,
            "stage_latencies": dict(self.stage_latencies),
        }
