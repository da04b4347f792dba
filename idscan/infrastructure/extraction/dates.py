"""
Date engine: normalization, sanity range and per-document usage tracking.

OCR gives dates in many shapes (``05/06/1990``, ``1990-06-05``,
``5 Jun 1990``). Every candidate is parsed to a ``datetime.date`` so that
comparisons (earliest/latest, already-used) work on values, not strings.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime

from idscan.core.entities.recognized_text import RecognizedText

logger = logging.getLogger(__name__)

FALLBACK_INPUT_FORMATS = (
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%b %d %Y",
)

MIN_YEAR = 1900
MAX_YEARS_AHEAD = 50

# Fields named like this live at the late end of the timeline; birth/issue/
# first/start and unnamed fields take the earliest date
LATEST_HINTS = ("expiry", "expire", "valid", "end")

_ABBREV_DOT = re.compile(r"(?<=[A-Za-z])\.")
_SEPT = re.compile(r"\bsept\b", re.IGNORECASE)


@dataclass
class DateUsageScope:
    """
    Dates already assigned during one extraction pass over one document.

    Created empty per pass and handed to the engine explicitly, so two
    scans never see each other's dates.
    """
    document_id: str = ""
    used: set[date] = field(default_factory=set)

    def is_used(self, value: date) -> bool:
        return value in self.used

    def mark_used(self, value: date) -> None:
        self.used.add(value)


@dataclass(frozen=True)
class DateCandidate:
    text: str
    offset: int
    value: date


def parse_date(text: str, hint: str | None = None) -> date | None:
    """Parse with the caller's hint first, then the fixed format list."""
    cleaned = " ".join(_SEPT.sub("Sep", _ABBREV_DOT.sub("", text.strip())).split())
    if not cleaned:
        return None
    formats = ((hint,) if hint else ()) + FALLBACK_INPUT_FORMATS
    for fmt in formats:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


def is_sane(value: date, today: date | None = None) -> bool:
    today = today or date.today()
    return MIN_YEAR <= value.year <= today.year + MAX_YEARS_AHEAD


def format_date(value: date, fmt: str) -> str:
    return value.strftime(fmt)


def collect_candidates(
    text: RecognizedText,
    scope: DateUsageScope,
    hint: str | None = None,
    today: date | None = None,
) -> list[DateCandidate]:
    """All parseable, sane, not-yet-used dates in the text, by offset."""
    candidates = []
    for match in text.find_dates():
        value = parse_date(match.text, hint)
        if value is None:
            logger.debug(f"Unparseable date candidate: {match.text!r}")
            continue
        if not is_sane(value, today) or scope.is_used(value):
            continue
        candidates.append(DateCandidate(text=match.text, offset=match.offset, value=value))
    return candidates


def nearest_after(candidates: list[DateCandidate], label_offsets: list[int]) -> DateCandidate | None:
    """Candidate closest after any label occurrence; None if none follows a label."""
    best = None
    best_distance = None
    for label_end in label_offsets:
        for candidate in candidates:
            distance = candidate.offset - label_end
            if distance < 0:
                continue
            if best_distance is None or distance < best_distance:
                best, best_distance = candidate, distance
    return best


def choose_by_field_name(candidates: list[DateCandidate], key: str) -> tuple[DateCandidate, float]:
    """
    Pick by what the field name implies: expiry-like → latest (0.7),
    everything else → earliest (0.6).
    """
    lowered = key.casefold()
    ordered = sorted(candidates, key=lambda c: (c.value, c.offset))
    if any(h in lowered for h in LATEST_HINTS):
        return ordered[-1], 0.7
    return ordered[0], 0.6
