"""
Use Case: Document Scanning Session.

Liga o Capture Gate ao Scan Document: cada frame capturado vai para o
pipeline de OCR/extração; o último resultado válido fica guardado até
ser confirmado ou descartado (retake).
"""

import logging

from idscan.core.entities.capture import (
    CaptureState,
    DetectionProgress,
    ErrorOccurred,
    FrameCaptured,
)
from idscan.core.entities.document_profile import DocumentProfile
from idscan.core.entities.fields import FieldSpec
from idscan.core.entities.scan_result import DocumentScanResult
from idscan.core.use_cases.auto_capture import CaptureGate
from idscan.core.use_cases.scan_document import ScanDocumentUseCase

logger = logging.getLogger(__name__)


class DocumentScanningSession:

    def __init__(
        self,
        gate: CaptureGate,
        scan_use_case: ScanDocumentUseCase,
        keywords: list[str] | tuple[str, ...],
        fields: list[FieldSpec] | tuple[FieldSpec, ...],
        auto_capture: bool = True,
    ):
        self.gate = gate
        self._scan = scan_use_case
        self.keywords = tuple(keywords)
        self.fields = tuple(fields)
        self.auto_capture = auto_capture

        self._result: DocumentScanResult | None = None
        self.last_result: DocumentScanResult | None = None
        self.error_message: str | None = None
        self.progress: DetectionProgress | None = None

    @classmethod
    def for_profile(cls, gate, scan_use_case, profile: DocumentProfile, auto_capture: bool = True):
        return cls(gate, scan_use_case, profile.keywords, profile.fields, auto_capture)

    @property
    def result(self) -> DocumentScanResult | None:
        return self._result

    def start(self) -> bool:
        """Inicializa a câmera e, em modo automático, liga a auto-captura."""
        self.gate.initialize()
        if self.gate.state != CaptureState.READY:
            self.error_message = self.gate.session.error_message
            return False
        if self.auto_capture:
            return self.gate.start_auto_capture()
        return True

    def capture(self) -> DocumentScanResult | None:
        """Captura manual seguida do processamento do frame."""
        self.gate.capture_manually()
        return self.process_events()

    def process_events(self) -> DocumentScanResult | None:
        """
        Consome os eventos pendentes do gate.

        Returns:
            O resultado válido atual (None se não há).
        """
        for event in self.gate.drain_events():
            if isinstance(event, DetectionProgress):
                self.progress = event
            elif isinstance(event, ErrorOccurred):
                self.error_message = event.message
            elif isinstance(event, FrameCaptured):
                self._process_frame(event)
        return self._result

    def _process_frame(self, event: FrameCaptured) -> None:
        result = self._scan.execute(event.frame, self.keywords, self.fields)
        self.last_result = result
        if result.is_valid:
            self._result = result
            self.error_message = None
            logger.info(f"[{result.document_id}] Scan held for confirmation")
        else:
            self._result = None
            self.error_message = result.error_message
            logger.info(f"[{result.document_id}] Scan rejected: {result.error_message}")

    def retake(self) -> None:
        """Descarta o resultado e recomeça a detecção."""
        self._result = None
        self.last_result = None
        self.error_message = None
        self.progress = None
        self.gate.drain_events()
        self.gate.reset_detection()
        if self.auto_capture:
            self.gate.start_auto_capture()

    def confirm(self) -> DocumentScanResult:
        if self._result is None:
            raise RuntimeError(self.error_message or "No scanned document to confirm")
        self.gate.stop_auto_capture()
        return self._result

    def close(self) -> None:
        self.gate.release()
