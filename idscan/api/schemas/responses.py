"""
Pydantic schemas — Request/Response models para a API.
"""

from pydantic import BaseModel, Field

from idscan.core.entities.fields import FieldSpec, FieldType


class FieldSpecRequest(BaseModel):
    key: str = Field(min_length=1)
    type: FieldType = FieldType.STRING
    alternative_keys: list[str] = []
    min_length: int | None = None
    max_length: int | None = None
    output_date_format: str | None = None
    input_date_format_hint: str | None = None

    def to_spec(self) -> FieldSpec:
        return FieldSpec(
            key=self.key,
            type=self.type,
            alternative_keys=tuple(self.alternative_keys),
            min_length=self.min_length,
            max_length=self.max_length,
            output_date_format=self.output_date_format,
            input_date_format_hint=self.input_date_format_hint,
        )


class FieldResultResponse(BaseModel):
    key: str
    type: FieldType
    value: str | None = None
    found: bool = False
    confidence: float = 0.0
    iso_date: str | None = None


class ScanResponse(BaseModel):
    document_id: str
    is_valid: bool
    error_message: str | None = None
    profile: str | None = None
    fields: list[FieldResultResponse] = []
    values: dict[str, str | None] = {}
    total_latency_ms: float = 0.0
    stage_latencies: dict = {}


class QualityResponse(BaseModel):
    brightness: float
    blur_score: float
    acceptable: bool
    reasons: list[str]
    min_brightness: float
    min_blur: float


class ProfileResponse(BaseModel):
    name: str
    display_name: str
    keywords: list[str]
    fields: list[FieldSpecRequest]
