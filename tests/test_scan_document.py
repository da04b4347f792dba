"""
End-to-end tests for the scan orchestrator.
"""
import numpy as np
import pytest

from conftest import CIVIL_ID_TEXT, TODAY
from idscan.core.entities.document_profile import CIVIL_ID
from idscan.core.entities.scan_result import DOCUMENT_TYPE_MISMATCH
from idscan.core.errors import RecognitionError
from idscan.core.interfaces.ocr_engine import IOCREngine
from idscan.core.use_cases.scan_document import ScanDocumentUseCase
from idscan.infrastructure.extraction import FieldExtractionEngine
from idscan.infrastructure.ocr.static_text_engine import StaticTextOCREngine
from idscan.infrastructure.rules.keyword_validator import KeywordDocumentValidator


class FailingOCREngine(IOCREngine):
    def recognize(self, image):
        raise RecognitionError("engine crashed")


def make_use_case(ocr):
    return ScanDocumentUseCase(
        ocr_engine=ocr,
        validator=KeywordDocumentValidator(),
        extractor=FieldExtractionEngine(today=TODAY),
    )


def test_valid_civil_id():
    ocr = StaticTextOCREngine(CIVIL_ID_TEXT)
    result = make_use_case(ocr).execute(b"jpeg", CIVIL_ID.keywords, CIVIL_ID.fields, document_id="doc-42")

    assert result.is_valid
    assert result.error_message is None
    assert result.document_id == "doc-42"
    assert result.get("civil number").value == "12345678"
    assert result.get("expiry date").value == "01/02/2030"
    assert ocr.calls == 1
    assert set(result.stage_latencies) == {"ocr_ms", "validate_ms", "extract_ms"}
    assert result.total_latency_ms >= 0


def test_flat_map():
    result = make_use_case(StaticTextOCREngine(CIVIL_ID_TEXT)).execute(
        np.zeros((10, 10, 3), dtype=np.uint8), CIVIL_ID.keywords, CIVIL_ID.fields
    )
    flat = result.to_dict()
    assert flat["isValid"] is True
    assert flat["errorMessage"] is None
    assert flat["name"] == "AHMED SALIM AL HARTHY"
    assert len(flat) == 2 + len(CIVIL_ID.fields)


def test_text_without_keywords_is_invalid():
    ocr = StaticTextOCREngine("GROCERY RECEIPT\nTOTAL 12.50")
    result = make_use_case(ocr).execute(b"jpeg", CIVIL_ID.keywords, CIVIL_ID.fields, document_id="doc-7")

    assert not result.is_valid
    assert result.fields == ()
    assert result.error_message == DOCUMENT_TYPE_MISMATCH
    assert result.document_id == "doc-7"
    assert set(result.stage_latencies) == {"ocr_ms", "validate_ms"}
    assert result.to_dict() == {"isValid": False, "errorMessage": DOCUMENT_TYPE_MISMATCH}
    assert "extract_ms" not in result.stage_latencies
    assert ocr.calls == 1


def test_ocr_failure_is_reported_not_raised():
    result = make_use_case(FailingOCREngine()).execute(b"jpeg", CIVIL_ID.keywords, CIVIL_ID.fields)

    assert not result.is_valid
    assert result.fields == ()
    assert result.error_message == "Error scanning document: engine crashed"


def test_generated_document_id():
    result = make_use_case(StaticTextOCREngine(CIVIL_ID_TEXT)).execute(b"x", [], [])
    assert result.is_valid
    assert len(result.document_id) == 36


@pytest.mark.parametrize("run", range(3))
def test_repeated_scans_are_identical(run):
    use_case = make_use_case(StaticTextOCREngine(CIVIL_ID_TEXT))
    first = use_case.execute(b"x", CIVIL_ID.keywords, CIVIL_ID.fields)
    second = use_case.execute(b"x", CIVIL_ID.keywords, CIVIL_ID.fields)
    assert first.fields == second.fields


def test_payload_shape():
    result = make_use_case(StaticTextOCREngine(CIVIL_ID_TEXT)).execute(b"x", CIVIL_ID.keywords, CIVIL_ID.fields)
    payload = result.as_payload()
    birth = next(f for f in payload["fields"] if f["key"] == "date of birth")
    assert birth == {
        "key": "date of birth",
        "type": "date",
        "value": "05/06/1990",
        "found": True,
        "confidence": 0.8,
        "iso_date": "1990-06-05",
    }
