"""
Scan a single ID document image (or replay stored OCR text) from the command line.

    python scripts/scan_image.py card.jpg --profile civil_id
    python scripts/scan_image.py card.jpg --fields fields.json --keywords civil,identity
    python scripts/scan_image.py --text ocr_dump.txt --profile driving_license
    python scripts/scan_image.py --camera --profile civil_id
"""
import argparse
import json
import logging
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import cv2

from idscan.config.settings import get_settings
from idscan.core.entities.capture import CaptureState
from idscan.core.entities.document_profile import PROFILES, get_profile
from idscan.core.entities.fields import FieldSpec
from idscan.core.use_cases.auto_capture import CaptureConfig, CaptureGate
from idscan.core.use_cases.scan_document import ScanDocumentUseCase
from idscan.core.use_cases.scanning_session import DocumentScanningSession
from idscan.infrastructure.camera.opencv_camera import OpenCVCamera
from idscan.infrastructure.extraction import BoilerplateVocabulary, DEFAULT_VOCABULARY, FieldExtractionEngine
from idscan.infrastructure.ocr.static_text_engine import StaticTextOCREngine
from idscan.infrastructure.quality.opencv_quality_scorer import OpenCVQualityScorer
from idscan.infrastructure.rules.keyword_validator import KeywordDocumentValidator


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Scan an ID document image")
    parser.add_argument("image", nargs="?", help="Image file (JPEG/PNG)")
    parser.add_argument("--text", help="Replay OCR text from a file instead of running OCR")
    parser.add_argument("--camera", action="store_true", help="Auto-capture from the configured camera")
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait for a camera capture")
    parser.add_argument("--profile", choices=sorted(PROFILES), help="Built-in document profile")
    parser.add_argument("--fields", help="JSON file with a list of field specs")
    parser.add_argument("--keywords", help="Comma-separated document keywords")
    parser.add_argument("--vocabulary", help="JSON boilerplate vocabulary file")
    parser.add_argument("--json", action="store_true", help="Print the flat result map as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    if not (args.image or args.text or args.camera):
        parser.error("an image, --text or --camera is required")
    if not args.profile and not args.fields:
        parser.error("--profile or --fields is required")
    return args


def load_request(args):
    if args.profile:
        profile = get_profile(args.profile)
        return list(profile.keywords), list(profile.fields)

    with open(args.fields, encoding="utf-8") as fh:
        specs = [FieldSpec(**item) for item in json.load(fh)]
    keywords = [k.strip() for k in (args.keywords or "").split(",") if k.strip()]
    return keywords, specs


def build_ocr(args, settings):
    if args.text:
        with open(args.text, encoding="utf-8") as fh:
            return StaticTextOCREngine(fh.read())
    from idscan.infrastructure.ocr.paddle_ocr_engine import PaddleOCREngine
    return PaddleOCREngine(lang=settings.ocr_lang, use_gpu=settings.ocr_use_gpu)


def capture_and_scan(args, settings, use_case, keywords, specs):
    """Auto-capture from the camera, scan the captured frame, return the result."""
    gate = CaptureGate(
        OpenCVCamera(settings.camera_index),
        OpenCVQualityScorer(settings.brightness_stride, settings.blur_stride),
        CaptureConfig.from_settings(settings),
    )
    session = DocumentScanningSession(gate, use_case, keywords, specs)
    try:
        if not session.start():
            print(f"ERROR: {session.error_message or gate.state.value}")
            return None
        print(f"  Camera {settings.camera_index}: hold the document steady...")
        deadline = time.monotonic() + args.timeout
        while time.monotonic() < deadline:
            session.process_events()
            if gate.state == CaptureState.CAPTURED or gate.session.error_message:
                break
            time.sleep(0.1)
        session.process_events()
        if gate.state != CaptureState.CAPTURED:
            print(f"ERROR: {session.error_message or 'no steady frame captured'}")
            return None
        return session.last_result
    finally:
        session.close()


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings()

    print("=" * 60)
    print("  ID Document Scan")
    print("=" * 60)

    image = None
    if args.image:
        image = cv2.imread(args.image)
        if image is None:
            print(f"ERROR: cannot read {args.image}")
            return 1
        h, w = image.shape[:2]
        print(f"  Image: {args.image} ({w}x{h})")

        scorer = OpenCVQualityScorer(settings.brightness_stride, settings.blur_stride)
        score = scorer.score(image)
        ok = score.is_acceptable(settings.min_brightness, settings.min_blur)
        print(f"  Brightness: {score.brightness:.1f}  Blur: {score.blur_score:.1f}  "
              f"{'OK' if ok else 'REJECT ' + ','.join(score.rejection_reasons(settings.min_brightness, settings.min_blur))}")

    keywords, specs = load_request(args)
    vocab_path = args.vocabulary or settings.vocabulary_path
    vocabulary = BoilerplateVocabulary.from_json(vocab_path) if vocab_path else DEFAULT_VOCABULARY

    use_case = ScanDocumentUseCase(
        ocr_engine=build_ocr(args, settings),
        validator=KeywordDocumentValidator(ratio=settings.keyword_match_ratio),
        extractor=FieldExtractionEngine(vocabulary=vocabulary),
    )

    t0 = time.perf_counter()
    if args.camera:
        result = capture_and_scan(args, settings, use_case, keywords, specs)
        if result is None:
            return 1
    else:
        result = use_case.execute(image, keywords, specs)
    elapsed = time.perf_counter() - t0

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 0 if result.is_valid else 2

    print(f"\n  Valid: {result.is_valid}  ({elapsed*1000:.0f}ms)")
    if result.error_message:
        print(f"  Error: {result.error_message}")
    print("-" * 60)
    for f in result.fields:
        status = "✓" if f.found else "∅"
        print(f"  {f.key:20s} | {f.type.value:6s} | conf={f.confidence:.2f} | {status} | {f.value or ''}")
    return 0 if result.is_valid else 2


if __name__ == "__main__":
    sys.exit(main())
