"""
Adapter: PaddleOCR Engine.

Reconhece texto com PaddleOCR e normaliza a saída para RecognizedText:
uma linha por faixa visual de caixas, em ordem de leitura (topo → base,
esquerda → direita), com bounding box e confiança por bloco.
"""

import logging
import os
from typing import Any

import numpy as np

from idscan.core.entities.recognized_text import RecognizedText, TextBlock
from idscan.core.errors import RecognitionError
from idscan.core.interfaces.ocr_engine import IOCREngine
from idscan.infrastructure.quality.opencv_quality_scorer import decode_image

os.environ.setdefault("PADDLE_PDX_DISABLE_MODEL_SOURCE_CHECK", "True")

logger = logging.getLogger(__name__)

# Caixas cujo topo difere menos que isso (px) ficam na mesma "faixa" de leitura
ROW_TOLERANCE_PX = 12


class PaddleOCREngine(IOCREngine):
    """
    OCR usando PaddleOCR.

    Pipeline:
        1. Decodifica bytes → BGR (se necessário)
        2. PaddleOCR extrai caixas + texto + confiança
        3. Ordena em ordem de leitura e monta texto/linhas/blocos
    """

    def __init__(self, lang: str = "en", use_gpu: bool = False):
        self._lang = lang
        self._use_gpu = use_gpu
        self._engine = None  # Lazy init (PaddleOCR é pesado)

    def _get_engine(self) -> Any:
        """Inicializa PaddleOCR sob demanda."""
        if self._engine is None:
            try:
                import paddleocr
            except ImportError as e:
                raise RecognitionError(
                    "PaddleOCR não instalado — instale com: pip install 'idscan[ocr]'"
                ) from e
            kwargs = self._engine_kwargs(getattr(paddleocr, "__version__", "3"))
            self._engine = paddleocr.PaddleOCR(**kwargs)
            logger.info(f"PaddleOCR inicializado ({kwargs})")
        return self._engine

    def _engine_kwargs(self, version: str) -> dict:
        """Argumentos do construtor: v3 usa ``device``, a API legada ``use_gpu``."""
        major = int(version.split(".")[0]) if version.split(".")[0].isdigit() else 3
        if major >= 3:
            return {"lang": self._lang, "device": "gpu" if self._use_gpu else "cpu"}
        return {
            "use_angle_cls": True,
            "lang": self._lang,
            "use_gpu": self._use_gpu,
            "show_log": False,
        }

    def recognize(self, image: Any) -> RecognizedText:
        """Reconhece o texto da imagem."""
        if isinstance(image, (bytes, bytearray)):
            try:
                image = decode_image(image)
            except ValueError as e:
                raise RecognitionError(str(e)) from e

        engine = self._get_engine()
        try:
            boxes = self._run(engine, image)
        except Exception as e:
            logger.warning(f"PaddleOCR falhou: {e}")
            raise RecognitionError(f"OCR failed: {e}") from e

        rows = self._reading_order(boxes)
        blocks = [TextBlock(text=t, bounding_box=b, confidence=c) for row in rows for b, t, c in row]
        # one line per visual row
        text = "\n".join(" ".join(t for _, t, _ in row) for row in rows)
        logger.debug(f"Texto extraído ({len(blocks)} blocos): {text!r}")
        return RecognizedText.from_text(text, blocks)

    def _run(self, engine: Any, image: np.ndarray) -> list[tuple[tuple[int, int, int, int], str, float]]:
        """Executa o OCR e devolve [(bbox, texto, confiança)]."""
        boxes = []
        if hasattr(engine, "predict"):
            # PaddleOCR v3+: lista de objetos com rec_texts/rec_scores/rec_polys
            for res in engine.predict(image):
                texts = res["rec_texts"] if isinstance(res, dict) else res.rec_texts
                scores = res["rec_scores"] if isinstance(res, dict) else res.rec_scores
                polys = res["rec_polys"] if isinstance(res, dict) else res.rec_polys
                for text, score, poly in zip(texts, scores, polys):
                    boxes.append((self._poly_to_bbox(poly), text, float(score)))
            return boxes

        # API legada: [[ [poly, (texto, conf)], ... ]]
        result = engine.ocr(image, cls=True)
        for line in (result[0] if result and result[0] else []):
            poly, (text, conf) = line[0], line[1]
            boxes.append((self._poly_to_bbox(poly), text, float(conf)))
        return boxes

    @staticmethod
    def _poly_to_bbox(poly) -> tuple[int, int, int, int]:
        pts = np.asarray(poly, dtype=np.float64).reshape(-1, 2)
        x1, y1 = pts.min(axis=0)
        x2, y2 = pts.max(axis=0)
        return int(x1), int(y1), int(x2), int(y2)

    @staticmethod
    def _reading_order(boxes: list) -> list[list]:
        """Agrupa por faixa vertical e ordena cada faixa da esquerda p/ direita."""
        ordered = sorted((b for b in boxes if b[1].strip()), key=lambda b: (b[0][1], b[0][0]))
        rows: list[list] = []
        for box in ordered:
            if rows and abs(box[0][1] - rows[-1][0][0][1]) <= ROW_TOLERANCE_PX:
                rows[-1].append(box)
            else:
                rows.append([box])
        return [sorted(row, key=lambda b: b[0][0]) for row in rows]
