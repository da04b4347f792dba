"""
Adapter: Static Text OCR Engine.

Devolve um texto fixo para qualquer imagem — usado para reprocessar
saídas de OCR já gravadas, em scripts e em testes.
"""

from typing import Any

from idscan.core.entities.recognized_text import RecognizedText
from idscan.core.interfaces.ocr_engine import IOCREngine


class StaticTextOCREngine(IOCREngine):

    def __init__(self, text: str):
        self._text = text
        self.calls = 0

    def recognize(self, image: Any) -> RecognizedText:
        self.calls += 1
        return RecognizedText.from_text(self._text)
