"""
Pytest configuration and shared fixtures.
"""
from datetime import date

import numpy as np
import pytest

from idscan.core.errors import PermissionDeniedError
from idscan.core.interfaces.camera import ICamera

TODAY = date(2026, 1, 15)

CIVIL_ID_TEXT = "\n".join([
    "SULTANATE OF OMAN",
    "ROYAL OMAN POLICE",
    "CIVIL STATUS - IDENTITY CARD",
    "Name: AHMED SALIM AL HARTHY",
    "Civil Number: 12345678",
    "Nationality: OMANI",
    "Date of Birth: 05/06/1990",
    "Expiry Date: 01/02/2030",
    "Profession: ENGINEER",
    "Place of Birth: MUSCAT",
])

DRIVING_LICENSE_TEXT = "\n".join([
    "SULTANATE OF OMAN",
    "ROYAL OMAN POLICE",
    "DRIVING LICENCE",
    "Name: SARA KHALFAN AL BALUSHI",
    "Licence No: 87654321",
    "Class: LIGHT",
    "Date of Birth: 12/03/1988",
    "Issue Date: 10/01/2020",
    "Expiry Date: 10/01/2030",
    "Nationality: OMANI",
])


def checkerboard(amplitude: float, size: int = 120, cell: int = 5, mean: float = 128.0, color: bool = True):
    """Checkerboard of ``cell``-px squares alternating mean ± amplitude/2."""
    yy, xx = np.indices((size, size))
    board = ((yy // cell + xx // cell) % 2).astype(np.float64)
    gray = np.clip(mean - amplitude / 2 + board * amplitude, 0, 255).astype(np.uint8)
    if color:
        return np.stack([gray, gray, gray], axis=-1)
    return gray


def uniform(value: int = 128, size: int = 120):
    return np.full((size, size, 3), value, dtype=np.uint8)


class FakeCamera(ICamera):
    """Serves frames from a list (the last one repeats)."""

    def __init__(self, frames=None, init_error=None, acquire_error=None, on_acquire=None):
        self.frames = list(frames or [checkerboard(200)])
        self.init_error = init_error
        self.acquire_error = acquire_error
        self.on_acquire = on_acquire
        self.flash_calls = []
        self.acquired = 0
        self.released = False
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        if self.init_error is not None:
            raise self.init_error
        self._initialized = True

    def acquire_frame(self):
        if self.acquire_error is not None:
            raise self.acquire_error
        if self.on_acquire is not None:
            self.on_acquire()
        index = min(self.acquired, len(self.frames) - 1)
        self.acquired += 1
        return self.frames[index]

    def set_flash(self, enabled: bool) -> None:
        self.flash_calls.append(enabled)

    def release(self) -> None:
        self.released = True
        self._initialized = False


@pytest.fixture
def good_frame():
    return checkerboard(200)


@pytest.fixture
def dark_frame():
    return checkerboard(20, mean=15)


@pytest.fixture
def flat_frame():
    return uniform(128)


@pytest.fixture
def fake_camera():
    return FakeCamera()


@pytest.fixture
def denied_camera():
    return FakeCamera(init_error=PermissionDeniedError())


@pytest.fixture
def civil_id_text():
    return CIVIL_ID_TEXT


@pytest.fixture
def driving_license_text():
    return DRIVING_LICENSE_TEXT
