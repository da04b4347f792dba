"""
Keyword-ratio Document Validator.

A page is accepted as the expected document type when enough of the type's
vocabulary shows up in the OCR text (case-insensitive substring match).
"""

import logging

from idscan.core.entities.recognized_text import RecognizedText
from idscan.core.interfaces.document_validator import IDocumentValidator

logger = logging.getLogger(__name__)

DEFAULT_MATCH_RATIO = 0.4


class KeywordDocumentValidator(IDocumentValidator):

    def __init__(self, ratio: float = DEFAULT_MATCH_RATIO):
        if not 0.0 <= ratio <= 1.0:
            raise ValueError(f"ratio must be within [0, 1], got {ratio}")
        self.ratio = ratio

    def matched_keywords(self, text: RecognizedText, keywords) -> list[str]:
        haystack = text.full_text.casefold()
        return [k for k in keywords if k.casefold() in haystack]

    def match_ratio(self, text: RecognizedText, keywords) -> float:
        """Fraction of keywords present in the text (1.0 for an empty list)."""
        if not keywords:
            return 1.0
        return len(self.matched_keywords(text, keywords)) / len(keywords)

    def validate(self, text, keywords) -> bool:
        try:
            if not keywords:
                return True
            matches = len(self.matched_keywords(text, keywords))
            valid = matches >= self.ratio * len(keywords)
            logger.debug(f"Keyword match {matches}/{len(keywords)} (ratio {self.ratio}) → {valid}")
            return valid
        except Exception as e:
            logger.warning(f"Document validation failed: {e}")
            return False
