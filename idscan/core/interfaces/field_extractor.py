"""
Contract: Field Extractor

Converte texto de OCR sem rótulos estruturados em valores tipados
com confiança, um FieldResult por FieldSpec.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from idscan.core.entities.fields import FieldResult, FieldSpec
from idscan.core.entities.recognized_text import RecognizedText


@dataclass(frozen=True)
class ExtractionResult:
    """Campos extraídos + o escopo de datas usado na passada."""
    fields: tuple[FieldResult, ...]
    date_scope: Any            # DateUsageScope da implementação


class IFieldExtractor(ABC):
    """
    Port: Field Extractor

    Cada campo é independente, exceto pelo conjunto de datas já
    atribuídas no documento — passado explicitamente, nunca global.
    """

    @abstractmethod
    def extract(
        self,
        text: RecognizedText,
        specs: list[FieldSpec] | tuple[FieldSpec, ...],
        date_scope: Any = None,
    ) -> ExtractionResult:
        """
        Args:
            text: Saída do OCR.
            specs: Campos a extrair, na ordem desejada.
            date_scope: Escopo de datas usadas; um novo é criado se None.

        Returns:
            ExtractionResult com um FieldResult por spec, na mesma ordem.
        """
        ...
