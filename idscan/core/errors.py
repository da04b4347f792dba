"""
Error taxonomy.

Device failures are exceptions that end a capture session. Recognition
failures are exceptions the scan pipeline recovers from. A rejected document
or a missing field is never an exception: it shows up in the result payload
(``is_valid=False`` / ``found=False``).
"""


class ScannerError(Exception):
    """Base exception for scanner errors."""

    def __init__(self, message: str, error_code: str, details: dict | None = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to JSON-serializable dict."""
        return {
            "success": False,
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


# ─── Camera / device ──────────────────────────────────────

class DeviceError(ScannerError):
    """Camera or permission failure. Fatal to the capture session."""

    def __init__(self, message: str, error_code: str = "DEVICE_ERROR", details: dict | None = None):
        super().__init__(message, error_code, details)


class PermissionDeniedError(DeviceError):
    def __init__(self, message: str = "Camera permission denied"):
        super().__init__(message, "PERMISSION_DENIED")


class CameraUnavailableError(DeviceError):
    def __init__(self, camera_index: int | None = None, reason: str | None = None):
        message = "No cameras available"
        if camera_index is not None:
            message = f"Failed to open camera {camera_index}"
        super().__init__(
            message,
            "CAMERA_UNAVAILABLE",
            details={"camera_index": camera_index, "reason": reason},
        )


class CameraNotInitializedError(DeviceError):
    def __init__(self):
        super().__init__("Camera not initialized", "CAMERA_NOT_INITIALIZED")


class FrameCaptureError(DeviceError):
    def __init__(self, reason: str | None = None):
        message = "Failed to capture image"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, "FRAME_CAPTURE_FAILED", details={"reason": reason})


# ─── OCR ──────────────────────────────────────────────────

class RecognitionError(ScannerError):
    """OCR call failed. The scan reports ``is_valid=False``, nothing crashes."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, "RECOGNITION_FAILED", details)
