"""
Contract: Document Validator

Decide se a página escaneada é do tipo de documento esperado,
a partir do vocabulário reconhecido pelo OCR.
"""

from abc import ABC, abstractmethod

from idscan.core.entities.recognized_text import RecognizedText


class IDocumentValidator(ABC):
    """
    Port: Document Validator

    Nunca levanta exceção para o chamador: falha interna = documento inválido.
    """

    @abstractmethod
    def validate(self, text: RecognizedText, keywords: list[str] | tuple[str, ...]) -> bool:
        """
        Args:
            text: Saída do OCR.
            keywords: Vocabulário esperado do tipo de documento.

        Returns:
            True se o documento corresponde ao tipo esperado.
        """
        ...
