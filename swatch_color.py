# -*- coding: utf-8 -*-
"""
Swatch: Perceptual color distance and nearest-color matching
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color values and the scalar API
===============================
Immutable value types (``Color``, ``XYZ``, ``Lab``, ``DeltaEWeights``) and
the single-color entry points built on ``swatch_colorengine``:

    to_xyz(color)            -> XYZ
    to_lab(color)            -> Lab
    color_difference(a, b)   -> float  (CIEDE2000)

Channel domain policy
---------------------
Device channels must lie in [0, 1].  By default a violation raises
``InvalidChannelError`` naming the channel and value.  Lenient mode clamps
instead, and is the only way out-of-range input is accepted:

    set_lenient_channels(True)     # process-wide
    to_lab(color, clip=True)       # per call, overrides the global mode

NaN channels are rejected in both modes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from collections.abc import Iterable, Sequence
from typing import Final, Optional, Tuple, TypeAlias, Union

import numpy as np

from swatch_colorengine import (
    ArrayFloat,
    ColorMetrics,
    ColorSpaceEngine,
    hue_angle_deg,
    validate_weights,
)

__all__ = [
    "CHANNEL_NAMES",
    "ColorLike",
    "InvalidChannelError",
    "set_lenient_channels",
    "is_lenient_channels",
    "Color",
    "XYZ",
    "Lab",
    "DeltaEWeights",
    "DEFAULT_WEIGHTS",
    "TEXTILE_WEIGHTS",
    "extract_channels",
    "extract_channels_batch",
    "to_xyz",
    "to_lab",
    "color_difference",
]

logger = logging.getLogger(__name__)

CHANNEL_NAMES: Final[Tuple[str, str, str, str]] = ("red", "green", "blue", "alpha")


# ---------------------------------------------------------------------------
# Errors & channel policy
# ---------------------------------------------------------------------------
class InvalidChannelError(ValueError):
    """A device channel lies outside [0, 1] (or is NaN)."""

    def __init__(self, channel: str, value: float) -> None:
        self.channel = channel
        self.value = value
        super().__init__(f"{channel} channel out of domain [0, 1]: {value!r}")


_LENIENT_CHANNELS: bool = False

def set_lenient_channels(enabled: bool = True) -> None:
    """
    Switch out-of-range channel handling between raising (default) and
    clamping to [0, 1].

    Args:
        enabled: If True, clamp instead of raising.
    """
    global _LENIENT_CHANNELS
    _LENIENT_CHANNELS = bool(enabled)
    logger.debug("Lenient channel clamping %s", "enabled" if _LENIENT_CHANNELS else "disabled")

def is_lenient_channels() -> bool:
    return _LENIENT_CHANNELS


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------
_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


@dataclass(slots=True, frozen=True)
class Color:
    """Device color: four channels nominally in [0, 1].

    Construction does not validate the domain; the channel policy is applied
    when the color enters a conversion, so lenient mode can still accept
    out-of-range values.
    """
    red:   float
    green: float
    blue:  float
    alpha: float = 1.0

    def __post_init__(self) -> None:
        for name in CHANNEL_NAMES:
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def from_rgb255(cls, red: int, green: int, blue: int, alpha: int = 255) -> Color:
        """Build from 8-bit channels (0..255)."""
        return cls(red / 255.0, green / 255.0, blue / 255.0, alpha / 255.0)

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#RGB``, ``#RRGGBB`` or ``#RRGGBBAA`` (the ``#`` is optional)."""
        m = _HEX_RE.match(text.strip())
        if m is None:
            raise ValueError(f"Not a hex color: {text!r}")
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        values = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        return cls.from_rgb255(*values)

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    def as_array(self) -> ArrayFloat:
        """Channels as a (4,) float64 array (R, G, B, A)."""
        return np.array([self.red, self.green, self.blue, self.alpha], dtype=np.float64)


@dataclass(slots=True, frozen=True)
class XYZ:
    """CIE XYZ tristimulus values on the [0, 100] scale (D65)."""
    X: float
    Y: float
    Z: float

    def as_array(self) -> ArrayFloat:
        return np.array([self.X, self.Y, self.Z], dtype=np.float64)


@dataclass(slots=True, frozen=True)
class Lab:
    """CIELAB coordinates.  L in [0, 100]; a and b are unbounded."""
    L: float
    a: float
    b: float

    @property
    def chroma(self) -> float:
        return float(np.hypot(self.a, self.b))

    @property
    def hue(self) -> float:
        """Hue angle in degrees on [0, 360); 0 for an achromatic color."""
        return hue_angle_deg(self.a, self.b)

    def as_array(self) -> ArrayFloat:
        return np.array([self.L, self.a, self.b], dtype=np.float64)


@dataclass(slots=True, frozen=True)
class DeltaEWeights:
    """CIEDE2000 parametric factors k_L, k_C, k_H.

    All 1.0 for reference viewing conditions; raise k_L to discount
    lightness differences (e.g. 2.0 for textiles).
    """
    k_L: float = 1.0
    k_C: float = 1.0
    k_H: float = 1.0

    def __post_init__(self) -> None:
        k_L, k_C, k_H = validate_weights(self.k_L, self.k_C, self.k_H)
        object.__setattr__(self, "k_L", k_L)
        object.__setattr__(self, "k_C", k_C)
        object.__setattr__(self, "k_H", k_H)


DEFAULT_WEIGHTS: Final[DeltaEWeights] = DeltaEWeights()
TEXTILE_WEIGHTS: Final[DeltaEWeights] = DeltaEWeights(k_L=2.0)

ColorLike: TypeAlias = Union[Color, str, Sequence[float], ArrayFloat]


# ---------------------------------------------------------------------------
# Channel extraction
# ---------------------------------------------------------------------------
def _raw_channels(value: ColorLike) -> ArrayFloat:
    if isinstance(value, Color):
        return value.as_array()
    if isinstance(value, str):
        return Color.from_hex(value).as_array()
    if isinstance(value, (bytes, bytearray)) or not isinstance(value, (Sequence, np.ndarray)):
        raise TypeError(f"Cannot extract color channels from {type(value).__name__}")

    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim != 1 or arr.shape[0] not in (3, 4):
        raise ValueError(f"Expected 3 or 4 channels, got shape {arr.shape}")
    if arr.shape[0] == 3:
        arr = np.append(arr, 1.0)
    return arr


def _apply_domain(channels: ArrayFloat, clip: Optional[bool]) -> ArrayFloat:
    """Enforce [0, 1] on an (N, 4) channel batch according to the policy."""
    lenient = _LENIENT_CHANNELS if clip is None else bool(clip)

    nan_mask = np.isnan(channels)
    if np.any(nan_mask):
        row, col = np.argwhere(nan_mask)[0]
        raise InvalidChannelError(CHANNEL_NAMES[col], float(channels[row, col]))

    outside = (channels < 0.0) | (channels > 1.0)
    if not np.any(outside):
        return channels
    if lenient:
        return np.clip(channels, 0.0, 1.0)
    row, col = np.argwhere(outside)[0]
    raise InvalidChannelError(CHANNEL_NAMES[col], float(channels[row, col]))


def extract_channels(value: ColorLike, *, clip: Optional[bool] = None) -> ArrayFloat:
    """
    Normalizes a color value into a (4,) float64 array of R, G, B, A.

    Args:
        value: A ``Color``, a hex string, or a sequence/array of 3 or 4
               floats in [0, 1] (alpha defaults to 1.0).
        clip: Per-call override of the channel policy.  ``None`` follows
              ``set_lenient_channels``.

    Raises:
        TypeError: Unsupported value type.
        ValueError: Wrong number of channels or malformed hex string.
        InvalidChannelError: A channel is outside [0, 1] in strict mode, or NaN.
    """
    return _apply_domain(_raw_channels(value)[np.newaxis, :], clip)[0]


def extract_channels_batch(values: Iterable[ColorLike], *, clip: Optional[bool] = None) -> ArrayFloat:
    """Batch form of ``extract_channels``; returns an (N, 4) array."""
    rows = [_raw_channels(v) for v in values]
    if not rows:
        return np.empty((0, 4), dtype=np.float64)
    return _apply_domain(np.vstack(rows), clip)


# ---------------------------------------------------------------------------
# Scalar API
# ---------------------------------------------------------------------------
def to_xyz(color: ColorLike, *, clip: Optional[bool] = None) -> XYZ:
    """CIE XYZ [0..100] of a device color (alpha ignored)."""
    rgba = extract_channels(color, clip=clip)
    X, Y, Z = ColorSpaceEngine.srgb_to_xyz(rgba[:3])
    return XYZ(float(X), float(Y), float(Z))


def to_lab(color: ColorLike, *, clip: Optional[bool] = None) -> Lab:
    """
    CIELAB (D65) of a device color.

    Alpha is carried by ``Color`` but does not take part in the conversion.
    """
    rgba = extract_channels(color, clip=clip)
    L, a, b = ColorSpaceEngine.srgb_to_lab(rgba[:3])
    return Lab(float(L), float(a), float(b))


def _lab_array(value: Union[Lab, Sequence[float], ArrayFloat]) -> ArrayFloat:
    if isinstance(value, Lab):
        return value.as_array()
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected an (L, a, b) triple, got shape {arr.shape}")
    return arr


def color_difference(a: Union[Lab, Sequence[float]], b: Union[Lab, Sequence[float]],
                     weights: DeltaEWeights = DEFAULT_WEIGHTS) -> float:
    """
    CIEDE2000 difference between two Lab colors.

    Args:
        a: First color as ``Lab`` or an (L, a, b) triple.
        b: Second color.
        weights: Parametric factors, ``DEFAULT_WEIGHTS`` (1, 1, 1) unless the
                 viewing conditions call for something else.

    Returns:
        Delta E 00, a non-negative float; 0 for identical inputs.
    """
    return ColorMetrics.delta_E_2000(_lab_array(a), _lab_array(b),
                                     weights.k_L, weights.k_C, weights.k_H)
