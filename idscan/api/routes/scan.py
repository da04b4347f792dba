"""
Routes: POST /scan, POST /quality, GET /profiles.
"""

import json
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import TypeAdapter, ValidationError

from idscan.api.schemas.responses import (
    FieldResultResponse,
    FieldSpecRequest,
    ProfileResponse,
    QualityResponse,
    ScanResponse,
)
from idscan.config.settings import get_settings
from idscan.core.entities.document_profile import PROFILES, get_profile
from idscan.core.use_cases.scan_document import ScanDocumentUseCase
from idscan.infrastructure.extraction.field_extractor import FieldExtractionEngine
from idscan.infrastructure.extraction.vocabulary import DEFAULT_VOCABULARY, BoilerplateVocabulary
from idscan.infrastructure.ocr.paddle_ocr_engine import PaddleOCREngine
from idscan.infrastructure.quality.opencv_quality_scorer import OpenCVQualityScorer
from idscan.infrastructure.rules.keyword_validator import KeywordDocumentValidator

logger = logging.getLogger(__name__)

router = APIRouter()

_field_specs_adapter = TypeAdapter(list[FieldSpecRequest])
_keywords_adapter = TypeAdapter(list[str])

# Lazy singletons
_use_case = None
_scorer = None


def get_scan_use_case() -> ScanDocumentUseCase:
    """Factory — build use case with concrete adapters."""
    global _use_case
    if _use_case is None:
        settings = get_settings()
        vocabulary = (
            BoilerplateVocabulary.from_json(settings.vocabulary_path)
            if settings.vocabulary_path
            else DEFAULT_VOCABULARY
        )
        _use_case = ScanDocumentUseCase(
            ocr_engine=PaddleOCREngine(lang=settings.ocr_lang, use_gpu=settings.ocr_use_gpu),
            validator=KeywordDocumentValidator(ratio=settings.keyword_match_ratio),
            extractor=FieldExtractionEngine(vocabulary=vocabulary),
        )
    return _use_case


def get_quality_scorer() -> OpenCVQualityScorer:
    global _scorer
    if _scorer is None:
        settings = get_settings()
        _scorer = OpenCVQualityScorer(
            brightness_stride=settings.brightness_stride,
            blur_stride=settings.blur_stride,
        )
    return _scorer


async def _read_image(file: UploadFile) -> bytes:
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image (JPEG/PNG)")
    image_bytes = await file.read()
    if len(image_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file")
    return image_bytes


def _resolve_request(profile: str | None, keywords: str | None, fields: str | None):
    """Profile name, or explicit keywords + fields JSON → (keywords, specs)."""
    if profile:
        try:
            doc_profile = get_profile(profile)
        except KeyError:
            raise HTTPException(status_code=400, detail=f"Unknown profile '{profile}'")
        return doc_profile.keywords, doc_profile.fields

    if not fields:
        raise HTTPException(status_code=400, detail="Provide either 'profile' or 'fields'")
    try:
        specs = [f.to_spec() for f in _field_specs_adapter.validate_json(fields)]
        keyword_list = _keywords_adapter.validate_json(keywords) if keywords else []
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid request: {e}")
    return keyword_list, specs


@router.post("/scan", response_model=ScanResponse)
async def scan_document(
    file: UploadFile = File(...),
    profile: str | None = Form(None),
    keywords: str | None = Form(None),
    fields: str | None = Form(None),
    use_case: ScanDocumentUseCase = Depends(get_scan_use_case),
):
    """
    Scan an ID document.

    Upload an image (JPEG/PNG) plus either a built-in profile name
    (``civil_id``, ``driving_license``) or explicit ``keywords`` / ``fields``
    as JSON arrays. Scan failures come back as ``is_valid=false``.
    """
    image_bytes = await _read_image(file)
    keyword_list, specs = _resolve_request(profile, keywords, fields)

    result = use_case.execute(image_bytes, keyword_list, specs)

    return ScanResponse(
        document_id=result.document_id,
        is_valid=result.is_valid,
        error_message=result.error_message,
        profile=profile,
        fields=[FieldResultResponse(**f.to_dict()) for f in result.fields],
        values={k: v for k, v in result.to_dict().items() if k not in ("isValid", "errorMessage")},
        total_latency_ms=result.total_latency_ms,
        stage_latencies=result.stage_latencies,
    )


@router.post("/quality", response_model=QualityResponse)
async def check_quality(
    file: UploadFile = File(...),
    scorer: OpenCVQualityScorer = Depends(get_quality_scorer),
):
    """Brightness / sharpness of a single frame against the capture thresholds."""
    image_bytes = await _read_image(file)
    try:
        score = scorer.score(image_bytes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    settings = get_settings()
    return QualityResponse(
        brightness=round(score.brightness, 2),
        blur_score=round(score.blur_score, 2),
        acceptable=score.is_acceptable(settings.min_brightness, settings.min_blur),
        reasons=score.rejection_reasons(settings.min_brightness, settings.min_blur),
        min_brightness=settings.min_brightness,
        min_blur=settings.min_blur,
    )


@router.get("/profiles", response_model=list[ProfileResponse])
async def list_profiles():
    return [ProfileResponse(**p.to_dict()) for p in PROFILES.values()]
