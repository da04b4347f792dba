"""
Entity: Document Profile

Um tipo de documento de identidade: vocabulário esperado (para validação)
e os campos a extrair. Modelo puro — sem dependência de framework.
"""

from dataclasses import dataclass

from idscan.core.entities.fields import FieldSpec, FieldType


@dataclass(frozen=True)
class DocumentProfile:
    """Entidade de domínio: perfil de documento."""
    name: str
    display_name: str
    keywords: tuple[str, ...]
    fields: tuple[FieldSpec, ...]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "keywords": list(self.keywords),
            "fields": [
                {
                    "key": f.key,
                    "type": f.type.value,
                    "alternative_keys": list(f.alternative_keys),
                    "min_length": f.min_length,
                    "max_length": f.max_length,
                }
                for f in self.fields
            ],
        }


CIVIL_ID = DocumentProfile(
    name="civil_id",
    display_name="Civil ID Card",
    keywords=("civil", "identity", "card", "name", "expiry", "birth", "nationality"),
    fields=(
        FieldSpec("name", FieldType.STRING),
        FieldSpec(
            "civil number",
            FieldType.ID,
            alternative_keys=("civil no", "id number"),
            min_length=7,
            max_length=8,
        ),
        FieldSpec("nationality", FieldType.STRING),
        FieldSpec("date of birth", FieldType.DATE, alternative_keys=("birth date", "dob")),
        FieldSpec("expiry date", FieldType.DATE, alternative_keys=("expiry", "valid until")),
        FieldSpec("profession", FieldType.STRING, alternative_keys=("occupation",)),
        FieldSpec("place of birth", FieldType.STRING),
    ),
)

DRIVING_LICENSE = DocumentProfile(
    name="driving_license",
    display_name="Driving License",
    keywords=("driving", "license", "licence", "expiry", "issue", "birth", "class"),
    fields=(
        FieldSpec("name", FieldType.STRING),
        FieldSpec(
            "license number",
            FieldType.ID,
            alternative_keys=("licence number", "license no", "licence no"),
            min_length=6,
            max_length=10,
        ),
        FieldSpec("license class", FieldType.STRING, alternative_keys=("licence class", "class")),
        FieldSpec("date of birth", FieldType.DATE, alternative_keys=("birth date", "dob")),
        FieldSpec("issue date", FieldType.DATE, alternative_keys=("date of issue",)),
        FieldSpec("expiry date", FieldType.DATE, alternative_keys=("date of expiry", "valid until")),
        FieldSpec("nationality", FieldType.STRING),
        FieldSpec("restrictions", FieldType.STRING),
    ),
)

PROFILES: dict[str, DocumentProfile] = {p.name: p for p in (CIVIL_ID, DRIVING_LICENSE)}


def get_profile(name: str) -> DocumentProfile:
    """Busca perfil pelo nome (case-insensitive). KeyError se não existir."""
    try:
        return PROFILES[name.strip().lower()]
    except KeyError:
        raise KeyError(f"Unknown document profile: {name!r}") from None
