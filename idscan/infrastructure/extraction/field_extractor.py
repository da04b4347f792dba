"""
Adapter: Heuristic Field Extraction Engine.

Turns label-free OCR text into typed, confidence-scored values.

Per field type:
    date   → label search, then corpus-wide scan disambiguated by label
             proximity or by what the field name implies (expiry → latest)
    number → label search with length/shape checks, then corpus token scan
    id     → same path as number
    string → label search with label stripping and value checks, then
             (name fields only) the first all-caps line that looks like a name
"""

import logging
import re
from datetime import date

from idscan.core.entities.fields import FieldResult, FieldSpec, FieldType
from idscan.core.entities.recognized_text import RecognizedText
from idscan.core.interfaces.field_extractor import ExtractionResult, IFieldExtractor
from idscan.infrastructure.extraction import dates
from idscan.infrastructure.extraction.dates import DateUsageScope
from idscan.infrastructure.extraction.label_search import key_words, label_offsets, search_label
from idscan.infrastructure.extraction.vocabulary import DEFAULT_VOCABULARY, BoilerplateVocabulary

logger = logging.getLogger(__name__)

PROXIMITY_CONFIDENCE = 0.7
NUMBER_FALLBACK_CONFIDENCE = 0.5
NAME_FALLBACK_CONFIDENCE = 0.7

MIN_DIGIT_RATIO_NUMBER = 0.7
MAX_DIGIT_RATIO_STRING = 0.5
MAX_DIGIT_RATIO_NAME_LINE = 0.3

MRZ_FILLER = re.compile(r"[<>]")
ID_LIKE_PREFIX = re.compile(r"[A-Z]{2,5}\d{6,}")
LETTERS_AND_SPACES = re.compile(r"^[^\W\d_]+(?:\s+[^\W\d_]+)*$")
TOKEN_SPLIT = re.compile(r"[\s:;,]+")
NUMBER_TOKEN_SHAPES = (
    re.compile(r"\d{6,}"),
    re.compile(r"(?=(?:[A-Za-z]*\d){5})[A-Za-z0-9]+"),
    re.compile(r"[A-Za-z]?\d{6,}"),
)


def _digit_ratio(value: str) -> float:
    return sum(ch.isdigit() for ch in value) / len(value) if value else 0.0


class FieldExtractionEngine(IFieldExtractor):
    """
    Extrator heurístico de campos.

    Sem estado por chamada: o conjunto de datas já atribuídas vive no
    DateUsageScope recebido/devolvido por ``extract``.
    """

    def __init__(self, vocabulary: BoilerplateVocabulary | None = None, today: date | None = None):
        self._vocabulary = vocabulary or DEFAULT_VOCABULARY
        self._today = today
        self._handlers = {
            FieldType.DATE: self._extract_date,
            FieldType.NUMBER: self._extract_number,
            FieldType.ID: self._extract_number,
            FieldType.STRING: self._extract_string,
        }

    def extract(self, text, specs, date_scope=None) -> ExtractionResult:
        """Extract every spec, in order, sharing one date scope."""
        scope = date_scope if date_scope is not None else DateUsageScope()
        results = []
        for spec in specs:
            try:
                result = self._handlers[spec.type](text, spec, scope)
            except Exception as e:
                logger.warning(f"Extraction of '{spec.key}' failed: {e}")
                result = FieldResult.not_found(spec)
            logger.debug(f"{spec.key} [{spec.type.value}] → {result.value!r} ({result.confidence})")
            results.append(result)
        return ExtractionResult(fields=tuple(results), date_scope=scope)

    # ─── Date ────────────────────────────────────────────────

    def _extract_date(self, text: RecognizedText, spec: FieldSpec, scope: DateUsageScope) -> FieldResult:
        hint = spec.input_date_format_hint

        def usable(value: str) -> bool:
            parsed = dates.parse_date(value, hint)
            return (
                parsed is not None
                and dates.is_sane(parsed, self._today)
                and not scope.is_used(parsed)
            )

        for key in spec.candidate_keys:
            match = search_label(text, key, FieldType.DATE, accept=usable, vocabulary=self._vocabulary)
            if match:
                return self._assign_date(spec, scope, dates.parse_date(match.value, hint), match.confidence)

        candidates = dates.collect_candidates(text, scope, hint, self._today)
        if not candidates:
            return FieldResult.not_found(spec)

        chosen = dates.nearest_after(candidates, label_offsets(text.full_text, spec.candidate_keys))
        confidence = PROXIMITY_CONFIDENCE
        if chosen is None:
            chosen, confidence = dates.choose_by_field_name(candidates, spec.key)
        return self._assign_date(spec, scope, chosen.value, confidence)

    @staticmethod
    def _assign_date(spec: FieldSpec, scope: DateUsageScope, value: date, confidence: float) -> FieldResult:
        scope.mark_used(value)
        return FieldResult.build(
            FieldType.DATE,
            spec.key,
            dates.format_date(value, spec.date_format),
            confidence,
            date_value=value,
        )

    # ─── Number / ID ─────────────────────────────────────────

    def _valid_number(self, value: str, spec: FieldSpec) -> bool:
        if spec.min_length is not None and len(value) < spec.min_length:
            return False
        if spec.max_length is not None and len(value) > spec.max_length:
            return False
        if not value[:1].isdigit():
            return False
        if _digit_ratio(value) < MIN_DIGIT_RATIO_NUMBER:
            return False
        return not self._vocabulary.is_boilerplate(value)

    def _extract_number(self, text: RecognizedText, spec: FieldSpec, scope: DateUsageScope) -> FieldResult:
        accept = lambda v: self._valid_number(v, spec)

        for key in spec.candidate_keys:
            match = search_label(text, key, spec.type, accept=accept, vocabulary=self._vocabulary)
            if match:
                return FieldResult.build(spec.type, spec.key, match.value, match.confidence)

        for token in self._number_tokens(text):
            if accept(token):
                return FieldResult.build(spec.type, spec.key, token, NUMBER_FALLBACK_CONFIDENCE)
        return FieldResult.not_found(spec)

    @staticmethod
    def _number_tokens(text: RecognizedText) -> list[str]:
        tokens = []
        for raw in TOKEN_SPLIT.split(text.full_text):
            token = raw.strip(".()[]")
            if not token or "/" in token or "-" in token:
                continue
            if any(shape.fullmatch(token) for shape in NUMBER_TOKEN_SHAPES):
                tokens.append(token)
        return tokens

    # ─── String ──────────────────────────────────────────────

    @staticmethod
    def _strip_label(value: str, key: str) -> str:
        """Drop a leading repeat of the label (exact, without spaces, or word by word)."""
        value = " ".join(value.split())
        lowered = value.casefold()
        label = " ".join(key_words(key))
        for prefix in (label, label.replace(" ", "")):
            if prefix and re.match(rf"{re.escape(prefix)}(?!\w)", lowered):
                value = value[len(prefix):]
                break
        words = value.lstrip(" :-").split()
        label_words = set(key_words(key))
        while words and words[0].casefold().strip(":-") in label_words:
            words.pop(0)
        return " ".join(words)

    def _valid_string(self, value: str, spec: FieldSpec) -> bool:
        if len(value) < 2 or MRZ_FILLER.search(value):
            return False
        if ID_LIKE_PREFIX.search(value):
            return False
        if _digit_ratio(value) > MAX_DIGIT_RATIO_STRING:
            return False
        if self._vocabulary.is_boilerplate(value):
            return False

        key = spec.key.casefold()
        if "nationality" in key:
            return len(value.split()) <= 3 and LETTERS_AND_SPACES.match(value) is not None
        if "name" in key:
            parts = value.split()
            return len(parts) >= 2 and all(len(p) >= 2 for p in parts)
        return True

    def _extract_string(self, text: RecognizedText, spec: FieldSpec, scope: DateUsageScope) -> FieldResult:
        for key in spec.candidate_keys:
            match = search_label(
                text,
                key,
                FieldType.STRING,
                accept=lambda v, k=key: self._valid_string(self._strip_label(v, k), spec),
                vocabulary=self._vocabulary,
            )
            if match:
                value = self._strip_label(match.value, key)
                return FieldResult.build(FieldType.STRING, spec.key, value, match.confidence)

        if "name" in spec.key.casefold():
            for line in text.lines:
                if self._is_potential_name(line):
                    return FieldResult.build(
                        FieldType.STRING, spec.key, " ".join(line.split()), NAME_FALLBACK_CONFIDENCE
                    )
        return FieldResult.not_found(spec)

    def _is_potential_name(self, line: str) -> bool:
        """All-caps line of 2+ words that is not card boilerplate."""
        line = line.strip()
        if not 5 <= len(line) <= 50:
            return False
        if MRZ_FILLER.search(line) or _digit_ratio(line) > MAX_DIGIT_RATIO_NAME_LINE:
            return False
        if line != line.upper() or not any(ch.isalpha() for ch in line):
            return False
        if sum(1 for w in line.split() if len(w) >= 2) < 2:
            return False
        return not self._vocabulary.has_excluded_word(line)
