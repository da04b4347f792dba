"""
Entity: Fields

Descrição declarativa dos campos a extrair (FieldSpec) e o resultado
tipado de cada extração (FieldResult). O resultado é uma união
discriminada por FieldType — cada tipo tem sua variante explícita.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

DEFAULT_OUTPUT_DATE_FORMAT = "%d/%m/%Y"


class FieldType(str, Enum):
    DATE = "date"
    NUMBER = "number"
    ID = "id"
    STRING = "string"


@dataclass(frozen=True)
class FieldSpec:
    """Campo a extrair: rótulo principal, sinônimos e restrições."""
    key: str
    type: FieldType = FieldType.STRING
    alternative_keys: tuple[str, ...] = ()
    min_length: int | None = None
    max_length: int | None = None
    output_date_format: str | None = None     # strftime, ex: "%d/%m/%Y"
    input_date_format_hint: str | None = None  # strptime, testado antes da lista fixa

    def __post_init__(self):
        if not self.key or not self.key.strip():
            raise ValueError("FieldSpec.key must be non-empty")
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(
                f"FieldSpec '{self.key}': min_length {self.min_length} > max_length {self.max_length}"
            )
        # Aceita list/set vindos de JSON e normaliza para tupla
        object.__setattr__(self, "type", FieldType(self.type))
        object.__setattr__(self, "alternative_keys", tuple(self.alternative_keys))

    @property
    def candidate_keys(self) -> tuple[str, ...]:
        """Chave principal seguida dos sinônimos, na ordem de tentativa."""
        return (self.key, *self.alternative_keys)

    @property
    def date_format(self) -> str:
        return self.output_date_format or DEFAULT_OUTPUT_DATE_FORMAT


@dataclass(frozen=True)
class FieldResult:
    """Resultado de extrair um FieldSpec de um RecognizedText."""
    key: str
    type: FieldType
    value: str | None = None
    confidence: float = 0.0

    @property
    def found(self) -> bool:
        return bool(self.value)

    @staticmethod
    def build(
        field_type: FieldType,
        key: str,
        value: str | None = None,
        confidence: float = 0.0,
        **extra,
    ) -> "FieldResult":
        """Cria a variante correspondente ao tipo do campo."""
        result_cls = RESULT_TYPES[FieldType(field_type)]
        if not value:
            return result_cls(key=key, value=None, confidence=0.0)
        return result_cls(key=key, value=value, confidence=round(confidence, 2), **extra)

    @classmethod
    def not_found(cls, spec: FieldSpec) -> "FieldResult":
        return cls.build(spec.type, spec.key)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "type": self.type.value,
            "value": self.value,
            "found": self.found,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class DateFieldResult(FieldResult):
    type: FieldType = field(default=FieldType.DATE, init=False)
    date_value: date | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["iso_date"] = self.date_value.isoformat() if self.date_value else None
        return data


@dataclass(frozen=True)
class NumberFieldResult(FieldResult):
    type: FieldType = field(default=FieldType.NUMBER, init=False)


@dataclass(frozen=True)
class IdFieldResult(FieldResult):
    type: FieldType = field(default=FieldType.ID, init=False)


@dataclass(frozen=True)
class StringFieldResult(FieldResult):
    type: FieldType = field(default=FieldType.STRING, init=False)


RESULT_TYPES: dict[FieldType, type[FieldResult]] = {
    FieldType.DATE: DateFieldResult,
    FieldType.NUMBER: NumberFieldResult,
    FieldType.ID: IdFieldResult,
    FieldType.STRING: StringFieldResult,
}
