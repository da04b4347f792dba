"""
Tests for domain entities: field specs, results, profiles and recognized text.
"""
import json

import pytest

from idscan.core.entities.document_profile import CIVIL_ID, DRIVING_LICENSE, get_profile
from idscan.core.entities.fields import (
    DateFieldResult,
    FieldResult,
    FieldSpec,
    FieldType,
    IdFieldResult,
    StringFieldResult,
)
from idscan.core.entities.recognized_text import RecognizedText
from idscan.core.entities.scan_result import DocumentScanResult
from idscan.core.errors import CameraUnavailableError, FrameCaptureError, RecognitionError
from idscan.infrastructure.extraction import BoilerplateVocabulary


class TestFieldSpec:

    def test_defaults(self):
        spec = FieldSpec("name")
        assert spec.type == FieldType.STRING
        assert spec.candidate_keys == ("name",)
        assert spec.date_format == "%d/%m/%Y"

    def test_normalizes_json_input(self):
        spec = FieldSpec("dob", type="date", alternative_keys=["birth date"])
        assert spec.type is FieldType.DATE
        assert spec.candidate_keys == ("dob", "birth date")

    @pytest.mark.parametrize("kwargs", [
        {"key": ""},
        {"key": "   "},
        {"key": "x", "min_length": 5, "max_length": 2},
        {"key": "x", "type": "colour"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            FieldSpec(**kwargs)


class TestFieldResult:

    def test_build_dispatches_variant(self):
        assert isinstance(FieldResult.build(FieldType.ID, "k", "123"), IdFieldResult)
        assert isinstance(FieldResult.build("string", "k", "abc"), StringFieldResult)

    def test_empty_value_is_not_found(self):
        result = FieldResult.build(FieldType.DATE, "k", "", 0.9)
        assert isinstance(result, DateFieldResult)
        assert not result.found
        assert result.confidence == 0.0

    def test_confidence_rounded(self):
        assert FieldResult.build(FieldType.NUMBER, "k", "1", 0.699999).confidence == 0.7


class TestRecognizedText:

    def test_views(self):
        text = RecognizedText.from_text("ROYAL OMAN POLICE\nDob 05/06/1990 and 1990-06-05\nNo 12345678 or 5 Jun 2030")
        assert text.lines[0] == "ROYAL OMAN POLICE"
        assert [d.text for d in text.find_dates()] == ["05/06/1990", "1990-06-05", "5 Jun 2030"]
        assert text.find_numbers() == ["12345678"]
        assert text.all_caps_lines() == ["ROYAL OMAN POLICE"]

    def test_empty(self):
        assert RecognizedText.from_text("  \n ").is_empty


class TestProfiles:

    def test_lookup_is_case_insensitive(self):
        assert get_profile(" Civil_ID ") is CIVIL_ID
        assert get_profile("driving_license") is DRIVING_LICENSE

    def test_unknown_profile(self):
        with pytest.raises(KeyError):
            get_profile("passport")

    def test_to_dict(self):
        data = CIVIL_ID.to_dict()
        assert data["name"] == "civil_id"
        assert [f["key"] for f in data["fields"]][:2] == ["name", "civil number"]


class TestScanResult:

    def test_invalid_factory(self):
        result = DocumentScanResult.invalid("boom", document_id="d1")
        assert result.to_dict() == {"isValid": False, "errorMessage": "boom"}
        assert result.get("anything") is None


class TestErrors:

    def test_error_payloads(self):
        assert CameraUnavailableError(2).message == "Failed to open camera 2"
        assert FrameCaptureError().message == "Failed to capture image"
        payload = RecognitionError("bad", {"engine": "paddle"}).to_dict()
        assert payload == {
            "success": False,
            "error": "bad",
            "error_code": "RECOGNITION_FAILED",
            "details": {"engine": "paddle"},
        }


class TestVocabulary:

    def test_whole_value_boilerplate(self):
        vocab = BoilerplateVocabulary()
        assert vocab.is_boilerplate("  Royal Oman Police. ")
        assert not vocab.is_boilerplate("OMAN")
        assert vocab.has_excluded_word("ROYAL GUARD")
        assert not vocab.has_excluded_word("DAVID")

    def test_from_json_extends_defaults(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"boilerplate": ["Kingdom of Bahrain"], "name_exclusions": ["bahrain"]}))
        vocab = BoilerplateVocabulary.from_json(path)
        assert vocab.is_boilerplate("KINGDOM OF BAHRAIN")
        assert vocab.is_boilerplate("royal oman police")
        assert vocab.has_excluded_word("BAHRAIN POST")

    def test_from_json_replace(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"boilerplate": ["x corp"], "replace": True}))
        vocab = BoilerplateVocabulary.from_json(path)
        assert not vocab.is_boilerplate("royal oman police")
        assert vocab.name_exclusions == frozenset()
