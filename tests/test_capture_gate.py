"""
Tests for the capture gate state machine.
"""
import time

import pytest

from conftest import FakeCamera, checkerboard, uniform
from idscan.core.entities.capture import (
    CaptureSession,
    CaptureState,
    DetectionProgress,
    ErrorOccurred,
    FrameCaptured,
    StateChanged,
    advance,
)
from idscan.core.errors import CameraUnavailableError, FrameCaptureError
from idscan.core.use_cases.auto_capture import CaptureConfig, CaptureGate
from idscan.infrastructure.quality.opencv_quality_scorer import OpenCVQualityScorer

GOOD = checkerboard(200)
BAD = uniform(128)


def make_gate(frames=None, camera=None, required=3):
    camera = camera or FakeCamera(frames=frames)
    gate = CaptureGate(camera, OpenCVQualityScorer(), CaptureConfig(required_good_frames=required))
    return gate, camera


def of_type(events, cls):
    return [e for e in events if isinstance(e, cls)]


class TestAdvance:

    def test_good_frames_reach_capturing(self):
        session = CaptureSession(state=CaptureState.READY, required_good_frames=2)
        session, events = advance(session, True)
        assert session.state == CaptureState.READY
        assert events == [DetectionProgress(1, 2)]
        session, events = advance(session, True)
        assert session.state == CaptureState.CAPTURING
        assert session.threshold_reached

    def test_bad_frame_resets(self):
        session = CaptureSession(state=CaptureState.READY, consecutive_good_frames=2)
        session, events = advance(session, False)
        assert session.consecutive_good_frames == 0
        assert events == [DetectionProgress(0, 3)]

    def test_invalid_session(self):
        with pytest.raises(ValueError):
            CaptureSession(required_good_frames=0)


class TestInitialize:

    def test_ready_after_initialize(self):
        gate, _ = make_gate()
        gate.initialize()
        assert gate.state == CaptureState.READY
        changes = of_type(gate.drain_events(), StateChanged)
        assert [c.current for c in changes] == [CaptureState.INITIALIZING, CaptureState.READY]

    def test_permission_denied(self, denied_camera):
        gate, _ = make_gate(camera=denied_camera)
        gate.initialize()
        assert gate.state == CaptureState.PERMISSION_DENIED
        errors = of_type(gate.drain_events(), ErrorOccurred)
        assert errors[0].error_code == "PERMISSION_DENIED"

    def test_unavailable_camera_is_error_and_retry_works(self):
        camera = FakeCamera(init_error=CameraUnavailableError())
        gate, _ = make_gate(camera=camera)
        gate.initialize()
        assert gate.state == CaptureState.ERROR
        assert gate.session.error_message == "No cameras available"

        camera.init_error = None
        gate.initialize()
        assert gate.state == CaptureState.READY
        assert gate.session.error_message is None

    def test_driver_crash_is_error_and_retry_works(self):
        camera = FakeCamera(init_error=RuntimeError("driver crashed"))
        gate, _ = make_gate(camera=camera)
        gate.initialize()
        assert gate.state == CaptureState.ERROR
        assert gate.session.error_message == "Camera failure: driver crashed"
        errors = of_type(gate.drain_events(), ErrorOccurred)
        assert [e.message for e in errors] == ["Camera failure: driver crashed"]

        camera.init_error = None
        gate.initialize()
        assert gate.state == CaptureState.READY


class TestAutoCapture:

    def test_captures_once_after_required_good_frames(self):
        gate, camera = make_gate([GOOD])
        gate.initialize()
        assert gate.start_auto_capture(interval=60)
        gate.drain_events()

        for _ in range(3):
            gate.tick()

        events = gate.drain_events()
        captured = of_type(events, FrameCaptured)
        assert len(captured) == 1
        assert captured[0].manual is False
        assert captured[0].score is not None
        assert of_type(events, DetectionProgress) == [
            DetectionProgress(1, 3), DetectionProgress(2, 3), DetectionProgress(3, 3),
        ]
        assert gate.state == CaptureState.CAPTURED
        assert not gate.is_auto_capturing

        gate.tick()
        assert of_type(gate.drain_events(), FrameCaptured) == []
        assert camera.acquired == 3

    def test_flash_is_turned_off_each_cycle(self):
        gate, camera = make_gate([GOOD])
        gate.initialize()
        gate.tick()
        assert camera.flash_calls == [False]

    def test_single_bad_frame_resets_counter(self):
        gate, _ = make_gate([GOOD, GOOD, BAD, GOOD])
        gate.initialize()
        gate.tick()
        gate.tick()
        assert gate.session.consecutive_good_frames == 2
        gate.tick()
        assert gate.session.consecutive_good_frames == 0
        assert gate.state == CaptureState.READY
        gate.tick()
        assert gate.session.consecutive_good_frames == 1
        progress = of_type(gate.drain_events(), DetectionProgress)
        assert DetectionProgress(0, 3) in progress

    def test_unscorable_frame_counts_as_bad(self):
        gate, _ = make_gate([GOOD, b"garbage"])
        gate.initialize()
        gate.tick()
        gate.tick()
        assert gate.session.consecutive_good_frames == 0
        assert gate.state == CaptureState.READY

    def test_reset_during_cycle_discards_result(self):
        camera = FakeCamera(frames=[GOOD])
        gate, _ = make_gate(camera=camera)
        gate.initialize()
        camera.on_acquire = gate.reset_detection
        gate.tick()
        assert gate.session.consecutive_good_frames == 0
        assert gate.state == CaptureState.READY
        assert DetectionProgress(1, 3) not in gate.drain_events()

    def test_overlapping_tick_is_dropped(self):
        camera = FakeCamera(frames=[GOOD])
        gate, _ = make_gate(camera=camera)
        gate.initialize()
        nested = []

        def tick_again():
            camera.on_acquire = None
            nested.append(gate.tick())

        camera.on_acquire = tick_again
        gate.tick()
        assert nested == [None]
        assert camera.acquired == 1
        assert gate.session.consecutive_good_frames == 1

    def test_device_failure_moves_to_error(self):
        camera = FakeCamera(acquire_error=FrameCaptureError("usb disconnected"))
        gate, _ = make_gate(camera=camera)
        gate.initialize()
        gate.start_auto_capture(interval=60)
        gate.tick()
        assert gate.state == CaptureState.ERROR
        assert gate.session.error_message == "Failed to capture image: usb disconnected"
        assert not gate.is_auto_capturing
        errors = of_type(gate.drain_events(), ErrorOccurred)
        assert len(errors) == 1

    def test_stop_resets_counter(self):
        gate, _ = make_gate([GOOD])
        gate.initialize()
        gate.start_auto_capture(interval=60)
        gate.tick()
        gate.stop_auto_capture()
        assert gate.session.consecutive_good_frames == 0
        assert not gate.is_auto_capturing

    def test_tick_from_stopped_timer_is_ignored(self):
        gate, camera = make_gate([GOOD], required=1)
        gate.initialize()
        gate.start_auto_capture(interval=60)
        timer = gate._timer
        gate.stop_auto_capture()
        gate.drain_events()

        timer.fire()

        assert gate.state == CaptureState.READY
        assert gate.drain_events() == []
        assert camera.acquired == 0

    def test_tick_from_replaced_timer_is_ignored(self):
        gate, camera = make_gate([GOOD], required=2)
        gate.initialize()
        gate.start_auto_capture(interval=60)
        old = gate._timer
        gate.stop_auto_capture()
        gate.start_auto_capture(interval=60)

        old.fire()
        assert camera.acquired == 0

        gate._timer.fire()
        assert camera.acquired == 1
        assert gate.session.consecutive_good_frames == 1
        gate.stop_auto_capture()

    def test_start_refused_when_not_ready(self):
        gate, _ = make_gate()
        assert gate.start_auto_capture() is False

    def test_invalid_interval(self):
        gate, _ = make_gate()
        gate.initialize()
        with pytest.raises(ValueError):
            gate.start_auto_capture(interval=0)

    def test_reset_after_capture_returns_to_ready(self):
        gate, _ = make_gate([GOOD], required=1)
        gate.initialize()
        gate.tick()
        assert gate.state == CaptureState.CAPTURED
        gate.reset_detection()
        assert gate.state == CaptureState.READY
        assert gate.session.consecutive_good_frames == 0

    def test_timer_drives_capture(self):
        gate, _ = make_gate([GOOD], required=2)
        gate.initialize()
        gate.start_auto_capture(interval=0.01)

        deadline = time.monotonic() + 5
        while gate.state != CaptureState.CAPTURED and time.monotonic() < deadline:
            time.sleep(0.01)
        time.sleep(0.1)

        assert gate.state == CaptureState.CAPTURED
        assert len(of_type(gate.drain_events(), FrameCaptured)) == 1
        assert not gate.is_auto_capturing


class TestManualCapture:

    def test_manual_capture_from_ready(self):
        gate, _ = make_gate([BAD])
        gate.initialize()
        gate.drain_events()

        frame = gate.capture_manually()

        assert frame is BAD
        assert gate.state == CaptureState.READY
        events = gate.drain_events()
        captured = of_type(events, FrameCaptured)
        assert len(captured) == 1 and captured[0].manual
        assert [c.current for c in of_type(events, StateChanged)] == [
            CaptureState.CAPTURING, CaptureState.READY,
        ]

    def test_manual_capture_refused_before_initialize(self):
        gate, camera = make_gate()
        assert gate.capture_manually() is None
        assert camera.acquired == 0

    def test_release(self):
        gate, camera = make_gate()
        gate.initialize()
        gate.release()
        assert camera.released
        assert gate.state == CaptureState.UNINITIALIZED
