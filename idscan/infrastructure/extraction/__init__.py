from .dates import DateUsageScope, parse_date
from .field_extractor import FieldExtractionEngine
from .label_search import LabelMatch, search_label
from .vocabulary import DEFAULT_VOCABULARY, BoilerplateVocabulary

__all__ = [
    "DateUsageScope",
    "parse_date",
    "FieldExtractionEngine",
    "LabelMatch",
    "search_label",
    "DEFAULT_VOCABULARY",
    "BoilerplateVocabulary",
]
