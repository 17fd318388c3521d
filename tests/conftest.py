# tests/conftest.py

from __future__ import annotations

import pytest

import swatch_color
import swatch_colorengine


@pytest.fixture(autouse=True)
def reset_runtime_modes():
    """Does: Start every test in fast-kernel, strict-channel mode and restore it afterwards."""
    swatch_colorengine.set_strict_ieee(False)
    swatch_color.set_lenient_channels(False)
    yield
    swatch_colorengine.set_strict_ieee(False)
    swatch_color.set_lenient_channels(False)
