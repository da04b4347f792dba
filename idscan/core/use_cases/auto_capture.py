"""
Use Case: Capture Gate.

Decide quando um frame da câmera está bom o suficiente para ir ao OCR.

Auto-captura: a cada intervalo o gate captura um frame, pontua brilho e
nitidez e conta frames bons consecutivos. Ao atingir o limite, publica
exatamente um FrameCaptured e para. Um frame ruim zera o contador.

Todos os eventos (StateChanged, DetectionProgress, FrameCaptured,
ErrorOccurred) vão para uma queue.Queue consumida pelo chamador.
"""

import logging
import queue
import threading
from dataclasses import dataclass, replace
from typing import Callable

from idscan.core.entities.capture import (
    CaptureEvent,
    CaptureSession,
    CaptureState,
    DetectionProgress,
    ErrorOccurred,
    FrameCaptured,
    StateChanged,
    advance,
)
from idscan.core.errors import DeviceError, PermissionDeniedError
from idscan.core.interfaces.camera import ICamera
from idscan.core.interfaces.quality_scorer import (
    DEFAULT_MIN_BLUR,
    DEFAULT_MIN_BRIGHTNESS,
    IQualityScorer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureConfig:
    required_good_frames: int = 3
    interval_seconds: float = 2.0
    min_brightness: float = DEFAULT_MIN_BRIGHTNESS
    min_blur: float = DEFAULT_MIN_BLUR

    def __post_init__(self):
        if self.required_good_frames <= 0:
            raise ValueError("required_good_frames must be > 0")
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

    @classmethod
    def from_settings(cls, settings) -> "CaptureConfig":
        return cls(
            required_good_frames=settings.required_good_frames,
            interval_seconds=settings.capture_interval_seconds,
            min_brightness=settings.min_brightness,
            min_blur=settings.min_blur,
        )


class RepeatingTimer:
    """Daemon thread that fires ``callback(timer)`` once per interval until cancelled."""

    def __init__(self, interval: float, callback: Callable[["RepeatingTimer"], None], name: str = "capture-timer"):
        self.interval = interval
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_active(self) -> bool:
        return self._thread.is_alive() and not self._cancelled.is_set()

    def fire(self) -> None:
        self._callback(self)

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            # Each tick runs on its own worker so a slow cycle never delays the clock
            threading.Thread(target=self.fire, daemon=True).start()


class CaptureGate:
    """
    Máquina de estados da captura.

    Estados: UNINITIALIZED → INITIALIZING → READY ⇄ PROCESSING → CAPTURING → CAPTURED
    Falhas de dispositivo levam a ERROR ou PERMISSION_DENIED, sem retry automático.
    """

    def __init__(
        self,
        camera: ICamera,
        scorer: IQualityScorer,
        config: CaptureConfig | None = None,
        events: queue.Queue | None = None,
    ):
        self._camera = camera
        self._scorer = scorer
        self.config = config or CaptureConfig()
        self.events: queue.Queue = events if events is not None else queue.Queue()

        self._session = CaptureSession(required_good_frames=self.config.required_good_frames)
        self._state_lock = threading.RLock()
        self._cycle_lock = threading.Lock()
        self._generation = 0
        self._timer: RepeatingTimer | None = None

    # ─── Snapshot ─────────────────────────────────────────

    @property
    def session(self) -> CaptureSession:
        with self._state_lock:
            return self._session

    @property
    def state(self) -> CaptureState:
        return self.session.state

    @property
    def is_auto_capturing(self) -> bool:
        with self._state_lock:
            return self._timer is not None and self._timer.is_active

    def drain_events(self) -> list[CaptureEvent]:
        """Remove e devolve todos os eventos pendentes, em ordem."""
        drained: list[CaptureEvent] = []
        while True:
            try:
                drained.append(self.events.get_nowait())
            except queue.Empty:
                return drained

    # ─── Lifecycle ────────────────────────────────────────

    def initialize(self) -> None:
        """Adquire a câmera. Chamar de novo após ERROR é o retry."""
        with self._state_lock:
            if self._session.state not in (
                CaptureState.UNINITIALIZED,
                CaptureState.ERROR,
                CaptureState.PERMISSION_DENIED,
            ):
                logger.debug(f"initialize() ignored in state {self._session.state.value}")
                return
            self._session = replace(self._session, consecutive_good_frames=0, error_message=None)
            self._set_state(CaptureState.INITIALIZING)

        try:
            self._camera.initialize()
        except DeviceError as e:
            self._fail(e)
            return
        except Exception as e:
            self._fail(DeviceError(f"Camera failure: {e}"))
            return

        with self._state_lock:
            self._set_state(CaptureState.READY)
        logger.info("Camera initialized")

    def release(self) -> None:
        self.stop_auto_capture()
        self._camera.release()
        with self._state_lock:
            self._session = replace(self._session, consecutive_good_frames=0)
            self._set_state(CaptureState.UNINITIALIZED)

    # ─── Auto capture ─────────────────────────────────────

    def start_auto_capture(self, interval: float | None = None) -> bool:
        """
        Liga o timer de auto-captura.

        Returns:
            True se o timer está rodando; False se o gate não está READY.
        """
        interval = interval if interval is not None else self.config.interval_seconds
        if interval <= 0:
            raise ValueError("interval must be > 0")

        with self._state_lock:
            if self._session.state != CaptureState.READY:
                logger.warning(f"Auto capture not started: gate is {self._session.state.value}")
                return False
            if self._timer is not None and self._timer.is_active:
                return True
            self._timer = RepeatingTimer(interval, self.tick)
            self._timer.start()
        logger.info(f"Auto capture started (every {interval}s, {self.config.required_good_frames} frames)")
        return True

    def stop_auto_capture(self) -> None:
        with self._state_lock:
            self._cancel_timer()
            self._generation += 1
            self._session = replace(self._session, consecutive_good_frames=0)
            if self._session.state == CaptureState.PROCESSING:
                self._set_state(CaptureState.READY)

    def reset_detection(self) -> None:
        """Zera o contador e volta para READY; ciclos em voo são descartados."""
        with self._state_lock:
            self._generation += 1
            self._session = replace(self._session, consecutive_good_frames=0, error_message=None)
            self._emit(DetectionProgress(0, self._session.required_good_frames))
            if self._camera.is_initialized:
                self._set_state(CaptureState.READY)

    def tick(self, timer: RepeatingTimer | None = None) -> None:
        """
        Um ciclo de captura. Ticks concorrentes são descartados, não enfileirados.

        Args:
            timer: timer que disparou o tick; ticks de um timer parado ou
                substituído são ignorados. None para um tick explícito.
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.debug("Capture cycle in flight, tick dropped")
            return
        try:
            self._run_cycle(timer)
        finally:
            self._cycle_lock.release()

    def _run_cycle(self, timer: RepeatingTimer | None) -> None:
        with self._state_lock:
            if timer is not None and (timer is not self._timer or timer.cancelled):
                logger.debug("Tick from a stopped timer ignored")
                return
            if self._session.state != CaptureState.READY:
                logger.debug(f"Tick skipped in state {self._session.state.value}")
                return
            generation = self._generation
            self._set_state(CaptureState.PROCESSING)

        frame = self._acquire()
        if frame is None:
            return

        score = None
        try:
            score = self._scorer.score(frame)
            acceptable = score.is_acceptable(self.config.min_brightness, self.config.min_blur)
        except ValueError as e:
            logger.warning(f"Frame could not be scored: {e}")
            acceptable = False

        with self._state_lock:
            if generation != self._generation:
                logger.debug("Detection reset during cycle, result discarded")
                return

            updated, progress = advance(self._session, acceptable)
            self._session = replace(updated, state=CaptureState.PROCESSING)
            for event in progress:
                self._emit(event)
            logger.debug(
                f"Frame {'accepted' if acceptable else 'rejected'} "
                f"({updated.consecutive_good_frames}/{updated.required_good_frames})"
            )

            if updated.state != CaptureState.CAPTURING:
                self._set_state(CaptureState.READY)
                return

            self._cancel_timer()
            self._set_state(CaptureState.CAPTURING)
            self._emit(FrameCaptured(frame=frame, score=score, manual=False))
            self._set_state(CaptureState.CAPTURED)
        logger.info("Document captured automatically")

    # ─── Manual capture ───────────────────────────────────

    def capture_manually(self):
        """
        Captura um frame imediatamente, sem pontuar.

        Returns:
            O frame, ou None se o gate não está READY ou a câmera falhou.
        """
        with self._state_lock:
            if self._session.state != CaptureState.READY:
                logger.warning(f"Manual capture refused: gate is {self._session.state.value}")
                return None
            self._set_state(CaptureState.CAPTURING)

        frame = self._acquire()
        if frame is None:
            return None

        with self._state_lock:
            self._emit(FrameCaptured(frame=frame, score=None, manual=True))
            self._set_state(CaptureState.READY)
        logger.info("Document captured manually")
        return frame

    # ─── Internals ────────────────────────────────────────

    def _acquire(self):
        try:
            self._camera.set_flash(False)
            return self._camera.acquire_frame()
        except DeviceError as e:
            self._fail(e)
        except Exception as e:
            self._fail(DeviceError(f"Camera failure: {e}"))
        return None

    def _fail(self, error: DeviceError) -> None:
        state = (
            CaptureState.PERMISSION_DENIED
            if isinstance(error, PermissionDeniedError)
            else CaptureState.ERROR
        )
        logger.error(f"Device failure [{error.error_code}]: {error.message}")
        with self._state_lock:
            self._cancel_timer()
            self._session = replace(
                self._session, consecutive_good_frames=0, error_message=error.message
            )
            self._emit(ErrorOccurred(message=error.message, error_code=error.error_code))
            self._set_state(state)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Auto capture timer cancelled")

    def _set_state(self, state: CaptureState) -> None:
        previous = self._session.state
        if previous == state:
            return
        self._session = replace(self._session, state=state)
        self._emit(StateChanged(previous, state))
        logger.info(f"Capture state {previous.value} → {state.value}")

    def _emit(self, event: CaptureEvent) -> None:
        self.events.put(event)
