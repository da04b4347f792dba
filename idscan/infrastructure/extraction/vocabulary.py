"""
Boilerplate vocabulary for identity documents.

Words and phrases that are printed on the card itself (issuer, card title,
field labels) and therefore must never be taken as a field value. Kept as
data: a new document family only needs a JSON file, not code changes.

JSON format::

    {
        "boilerplate": ["royal oman police", "..."],
        "name_exclusions": ["police", "..."],
        "replace": false
    }
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Whole-line / whole-value matches (case-insensitive)
DEFAULT_BOILERPLATE = frozenset({
    "sultanate of oman", "royal oman police",
    "civil status", "identity card", "id card", "resident card", "card",
    "driving licence", "driving license", "ministry of interior",
    "government", "republic", "kingdom", "passport", "signature",
    "holder's signature", "holder signature", "directorate general",
    "name", "full name", "nationality", "sex", "gender", "profession",
    "occupation", "place of birth", "date of birth", "birth date",
    "expiry date", "date of expiry", "issue date", "date of issue",
    "civil number", "civil no", "id number", "license number",
    "licence number", "license class", "licence class", "restrictions",
    "blood group", "valid until",
})

# Any of these words disqualifies an all-caps line as a person's name
DEFAULT_NAME_EXCLUSIONS = frozenset({
    "sultanate", "oman", "royal", "police", "civil", "status", "identity",
    "card", "resident", "driving", "licence", "license", "ministry",
    "interior", "government", "republic", "kingdom", "passport",
    "signature", "holder", "directorate", "general", "nationality",
    "name", "date", "birth", "expiry", "issue", "number", "class",
    "valid", "profession", "place", "sex", "gender", "restrictions",
    "blood", "group",
})

_EDGE_PUNCT = re.compile(r"^[\W_]+|[\W_]+$")


@dataclass(frozen=True)
class BoilerplateVocabulary:
    boilerplate: frozenset[str] = DEFAULT_BOILERPLATE
    name_exclusions: frozenset[str] = DEFAULT_NAME_EXCLUSIONS

    def is_boilerplate(self, text: str) -> bool:
        """True if the whole text is a known boilerplate word or phrase."""
        normalized = " ".join(_EDGE_PUNCT.sub("", text).casefold().split())
        return normalized in self.boilerplate

    def has_excluded_word(self, text: str) -> bool:
        for word in text.split():
            if _EDGE_PUNCT.sub("", word).casefold() in self.name_exclusions:
                return True
        return False

    @classmethod
    def from_json(cls, path: str | Path) -> "BoilerplateVocabulary":
        """Load a vocabulary file. Extends the defaults unless ``replace`` is true."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        boilerplate = {w.casefold().strip() for w in data.get("boilerplate", [])}
        exclusions = {w.casefold().strip() for w in data.get("name_exclusions", [])}
        if not data.get("replace", False):
            boilerplate |= DEFAULT_BOILERPLATE
            exclusions |= DEFAULT_NAME_EXCLUSIONS
        logger.info(
            f"Vocabulary loaded from {path}: {len(boilerplate)} boilerplate, "
            f"{len(exclusions)} name exclusions"
        )
        return cls(boilerplate=frozenset(boilerplate), name_exclusions=frozenset(exclusions))


DEFAULT_VOCABULARY = BoilerplateVocabulary()
