"""
Entity: Capture Session

Estado da máquina de captura e os eventos tipados que ela publica.
A função ``advance`` é a transição pura aplicada a cada frame pontuado.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class CaptureState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZING = "INITIALIZING"
    READY = "READY"
    CAPTURING = "CAPTURING"
    PROCESSING = "PROCESSING"
    CAPTURED = "CAPTURED"
    ERROR = "ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"


@dataclass(frozen=True)
class CaptureSession:
    """Snapshot imutável da sessão de captura."""
    state: CaptureState = CaptureState.UNINITIALIZED
    consecutive_good_frames: int = 0
    required_good_frames: int = 3
    error_message: str | None = None

    def __post_init__(self):
        if self.required_good_frames <= 0:
            raise ValueError("required_good_frames must be > 0")
        if self.consecutive_good_frames < 0:
            raise ValueError("consecutive_good_frames must be >= 0")

    @property
    def threshold_reached(self) -> bool:
        return self.consecutive_good_frames >= self.required_good_frames


# ─── Eventos ───────────────────────────────────────────────

@dataclass(frozen=True)
class StateChanged:
    previous: CaptureState
    current: CaptureState


@dataclass(frozen=True)
class DetectionProgress:
    consecutive: int
    required: int


@dataclass(frozen=True)
class FrameCaptured:
    frame: Any                  # np.ndarray (BGR)
    score: Any = None           # QualityScore | None (manual capture não pontua)
    manual: bool = False


@dataclass(frozen=True)
class ErrorOccurred:
    message: str
    error_code: str = "DEVICE_ERROR"


CaptureEvent = StateChanged | DetectionProgress | FrameCaptured | ErrorOccurred


def advance(session: CaptureSession, acceptable: bool) -> tuple[CaptureSession, list[CaptureEvent]]:
    """
    Aplica o resultado de um frame pontuado à sessão.

    Frame bom incrementa o contador; ao atingir o limite a sessão vai para
    CAPTURING. Frame ruim zera o contador e volta para READY.

    Returns:
        (nova sessão, eventos de progresso gerados)
    """
    if acceptable:
        count = session.consecutive_good_frames + 1
        updated = replace(session, consecutive_good_frames=count)
        events = [DetectionProgress(count, session.required_good_frames)]
        if updated.threshold_reached:
            updated = replace(updated, state=CaptureState.CAPTURING)
        else:
            updated = replace(updated, state=CaptureState.READY)
        return updated, events

    updated = replace(session, consecutive_good_frames=0, state=CaptureState.READY)
    return updated, [DetectionProgress(0, session.required_good_frames)]
