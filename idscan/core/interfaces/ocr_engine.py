"""
Contract: OCR Engine

Reconhece texto em imagens de documentos. Qualquer engine (PaddleOCR,
EasyOCR, Tesseract, API externa) deve implementar este contrato e
normalizar sua saída para RecognizedText.
"""

from abc import ABC, abstractmethod
from typing import Any

from idscan.core.entities.recognized_text import RecognizedText


class IOCREngine(ABC):
    """
    Port: OCR Engine

    Caixa-preta: recebe a imagem, devolve texto completo + linhas + blocos.
    Falhas devem ser sinalizadas com RecognitionError — nunca derrubam
    o pipeline, que as converte em ``is_valid=False``.
    """

    @abstractmethod
    def recognize(self, image: Any) -> RecognizedText:
        """
        Reconhece o texto da imagem.

        Args:
            image: Imagem em bytes (JPEG/PNG) ou np.ndarray BGR.

        Returns:
            RecognizedText com texto, linhas e blocos.

        Raises:
            RecognitionError: se o OCR falhar.
        """
        ...
