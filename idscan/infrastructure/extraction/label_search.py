"""
Label search: find a field by its printed label and read the value next to it.

Two attempts per line that carries the label:
  1. same line  → text after ``<label>[:-]`` (confidence 0.8)
  2. lookahead  → up to 3 following lines, skipping empty lines, lines with a
     colon and boilerplate lines (confidence 0.8 - 0.1 per line down)

A candidate is only taken when it has the right shape for the field type and
passes the caller's ``accept`` predicate.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from idscan.core.entities.fields import FieldType
from idscan.core.entities.recognized_text import RecognizedText
from idscan.infrastructure.extraction.vocabulary import DEFAULT_VOCABULARY, BoilerplateVocabulary

SAME_LINE_CONFIDENCE = 0.8
LOOKAHEAD_LINES = 3
LOOKAHEAD_PENALTY = 0.1

# OCR / print variants of label words, longest first
_NUMBER_FORMS = ("number", "num.", "num", "no.", "no", "#")
_LICENSE_FORMS = ("license", "licence")
_DATE_FORMS = ("date", "dt.", "dt")
SYNONYMS: dict[str, tuple[str, ...]] = {
    **{w: _NUMBER_FORMS for w in _NUMBER_FORMS},
    **{w: _LICENSE_FORMS for w in _LICENSE_FORMS},
    **{w: _DATE_FORMS for w in _DATE_FORMS},
}

LEADING_SEPARATOR = re.compile(r"^\s*[:\-]?\s*")
LEADING_DATE = re.compile(
    r"^(?:\d{2}[/\-]\d{2}[/\-]\d{4}|\d{4}[/\-]\d{2}[/\-]\d{2}|\d{1,2}[/\-]\d{1,2}[/\-]\d{4})(?!\d)"
)
NUMBER_SHAPE = re.compile(r"^\d+[A-Za-z0-9]*$")
PURELY_NUMERIC = re.compile(r"^[\d\s]+$")
_TOKEN_EDGE = re.compile(r"^[\s.,;:()\[\]]+|[\s.,;:()\[\]]+$")


@dataclass(frozen=True)
class LabelMatch:
    value: str
    confidence: float
    label_line: int
    value_line: int


def key_words(key: str) -> list[str]:
    return key.casefold().split()


def _form_pattern(form: str) -> str:
    pattern = re.escape(form)
    if form[0].isalnum():
        pattern = r"(?<!\w)" + pattern
    if form[-1].isalnum():
        pattern += r"(?!\w)"
    return pattern


@lru_cache(maxsize=256)
def key_pattern(key: str) -> re.Pattern:
    """Label as a flexible, case-insensitive pattern with synonyms expanded."""
    parts = []
    for word in key_words(key):
        forms = SYNONYMS.get(word, (word,))
        parts.append("(?:" + "|".join(_form_pattern(f) for f in forms) + ")")
    return re.compile(r"\s*".join(parts), re.IGNORECASE)


def line_contains_key(line: str, key: str) -> bool:
    """Every word of the key appears in the line (or the synonym pattern does)."""
    lowered = line.casefold()
    if all(word in lowered for word in key_words(key)):
        return True
    return key_pattern(key).search(line) is not None


def label_offsets(full_text: str, keys: tuple[str, ...] | list[str]) -> list[int]:
    """End offsets of every label occurrence in the full text."""
    offsets = []
    for key in keys:
        offsets.extend(m.end() for m in key_pattern(key).finditer(full_text))
    return sorted(set(offsets))


def coerce(candidate: str, field_type: FieldType) -> str | None:
    """Return the part of ``candidate`` that has the shape of ``field_type``."""
    candidate = candidate.strip()
    if not candidate:
        return None

    if field_type == FieldType.DATE:
        m = LEADING_DATE.match(candidate)
        return m.group(0) if m else None

    if field_type in (FieldType.NUMBER, FieldType.ID):
        token = _TOKEN_EDGE.sub("", candidate.split()[0])
        if len(token) >= 4 and NUMBER_SHAPE.match(token):
            return token
        return None

    value = " ".join(candidate.split())
    if len(value) >= 2 and not PURELY_NUMERIC.match(value):
        return value
    return None


def search_label(
    text: RecognizedText,
    key: str,
    field_type: FieldType,
    accept: Callable[[str], bool] | None = None,
    vocabulary: BoilerplateVocabulary = DEFAULT_VOCABULARY,
) -> LabelMatch | None:
    """First value found next to a line carrying ``key``, or None."""
    accept = accept or (lambda _: True)
    pattern = key_pattern(key)
    lines = text.lines

    for i, line in enumerate(lines):
        if not line_contains_key(line, key):
            continue

        m = pattern.search(line)
        if m:
            remainder = LEADING_SEPARATOR.sub("", line[m.end():], count=1)
            value = coerce(remainder, field_type)
            if value and accept(value):
                return LabelMatch(value, SAME_LINE_CONFIDENCE, i, i)

        for distance in range(1, LOOKAHEAD_LINES + 1):
            j = i + distance
            if j >= len(lines):
                break
            candidate = lines[j].strip()
            if not candidate or ":" in candidate or vocabulary.is_boilerplate(candidate):
                continue
            value = coerce(candidate, field_type)
            if value and accept(value):
                confidence = round(SAME_LINE_CONFIDENCE - LOOKAHEAD_PENALTY * distance, 2)
                return LabelMatch(value, confidence, i, j)

    return None
