# -*- coding: utf-8 -*-
"""
Swatch: Perceptual color distance and nearest-color matching
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Engine
============
Vectorised colorimetry core for the matcher.  Every public transform works
on ``(N, 3)`` float64 batches (or a single ``(3,)`` triple) and runs its hot
loop in a JIT-compiled Numba kernel.

Pipeline::

    sRGB [0..1] --EOTF--> linear RGB --x100, M--> XYZ [0..100] --f(t)--> CIELAB

and the CIEDE2000 difference on top of CIELAB.

The Lab constants are the classic EasyRGB/Lindbloom ones
(``0.008856`` / ``7.787``) rather than the exact 6/29 rationals, so Lab
values agree with the comparison tool this engine backs.

Notes:
- ``set_strict_ieee(True)`` swaps the transfer-function kernels to
  ``fastmath=False`` variants for IEEE 754 debugging.
- Every public result passes through a finite guard.  A NaN/inf produced
  from finite input is an engine bug; it is logged and raised as
  ``NonFiniteResultError`` instead of being handed to the caller.

References:
    - IEC 61966-2-1:1999 (sRGB Standard)
    - CIE 15:2004 "Colorimetry"
    - Sharma, G., Wu, W., & Dalal, E. N. (2005). "The CIEDE2000 color-difference
      formula: Implementation notes, supplementary test data, and mathematical
      observations". Color Research & Application 30(1).
"""

import functools
import logging
import time
import numpy as np
import numpy.typing as npt
from numba import njit, float64
from typing import Tuple, Final, TypeAlias, Callable, Any, Union

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",

    # --- Constants ---
    "REF_WHITE_D65",
    "XYZ_SCALE",
    "SRGB_LINEAR_THRESHOLD",
    "LAB_EPSILON",
    "LAB_LINEAR_SLOPE",
    "LAB_LINEAR_OFFSET",
    "C25_7",
    "DEG2RAD",
    "RAD2DEG",

    # --- Matrices ---
    "M_SRGB_TO_XYZ_T",

    # --- Configuration ---
    "set_strict_ieee",
    "is_strict_ieee",

    # --- Errors ---
    "NonFiniteResultError",

    # --- Decorators ---
    "handle_shapes",

    # --- Functions ---
    "hue_angle_deg",
    "validate_weights",

    # --- Classes ---
    "ColorSpaceEngine",
    "ColorMetrics",
]

logger = logging.getLogger(__name__)

# --- Type Aliases ---
# Kernels compile for float64; inputs are cast once at the public boundary.
ArrayFloat: TypeAlias = npt.NDArray[np.floating]

# --- Constants & Pre-Transposed Matrices ---

# D65 / 2 degree observer, on the same [0, 100] scale as the XYZ output.
REF_WHITE_D65: Final[ArrayFloat] = np.array([95.047, 100.000, 108.883], dtype=np.float64)
REF_WHITE_D65.flags.writeable = False

# Linear RGB is multiplied by this before the matrix so XYZ lands on [0, 100].
XYZ_SCALE: Final[float] = 100.0

# sRGB -> XYZ (D65), IEC 61966-2-1.
# Must only change together with the EOTF below: both encode the same sRGB/D65
# reference.  Pre-transposed for row-vector batches (N, 3) @ (3, 3).
_M_SRGB_TO_XYZ_BASE = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041]
], dtype=np.float64)
M_SRGB_TO_XYZ_T: Final[ArrayFloat] = _M_SRGB_TO_XYZ_BASE.T.copy()
M_SRGB_TO_XYZ_T.flags.writeable = False

# EOTF knee: below it the curve is the linear 1/12.92 segment.
SRGB_LINEAR_THRESHOLD: Final[float] = 0.04045

# CIELAB f(t): cube root above epsilon, linear segment below.
LAB_EPSILON: Final[float]       = 0.008856
LAB_LINEAR_SLOPE: Final[float]  = 7.787
LAB_LINEAR_OFFSET: Final[float] = 16.0 / 116.0

C25_7: Final[float]   = 25.0**7
DEG2RAD: Final[float] = np.pi / 180.0
RAD2DEG: Final[float] = 180.0 / np.pi


# --- Runtime Configuration ---
# When True, the transfer-function kernels use fastmath=False variants that
# preserve strict IEEE 754 semantics (inf / NaN propagation, no FP
# reassociation).  Useful for debugging edge-case numerical issues.
#
# Toggle at runtime via:
#     import swatch_colorengine as ce
#     ce.set_strict_ieee(True)   # enable strict mode
#     ce.set_strict_ieee(False)  # back to fast mode (default)
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 Numba kernels.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)
    logger.debug("Strict IEEE kernels %s", "enabled" if _STRICT_IEEE else "disabled")

def is_strict_ieee() -> bool:
    """Returns True when the strict IEEE kernels are active."""
    return _STRICT_IEEE


# =============================================================================
# 1. ERRORS & GUARDS
# =============================================================================

class NonFiniteResultError(ArithmeticError):
    """A conversion or distance produced NaN/inf from finite input."""


def _ensure_finite(values: Union[ArrayFloat, float], stage: str) -> Any:
    """Raise NonFiniteResultError if *values* holds any NaN or inf."""
    finite = np.isfinite(values)
    if not np.all(finite):
        bad = int(np.size(finite) - np.count_nonzero(finite))
        logger.error("Non-finite output from %s: %d of %d value(s)", stage, bad, np.size(finite))
        raise NonFiniteResultError(
            f"{stage} produced {bad} non-finite value(s) from finite input"
        )
    return values


def validate_weights(k_L: float, k_C: float, k_H: float) -> Tuple[float, float, float]:
    """
    Checks the CIEDE2000 parametric weights.

    Returns:
        The weights as plain floats.

    Raises:
        ValueError: If a weight is not finite or not strictly positive.
    """
    out = []
    for name, k in (("k_L", k_L), ("k_C", k_C), ("k_H", k_H)):
        k = float(k)
        if not np.isfinite(k) or k <= 0.0:
            raise ValueError(f"{name} must be a finite positive number, got {k!r}")
        out.append(k)
    return out[0], out[1], out[2]


# =============================================================================
# 2. ROBUST DECORATORS
# =============================================================================

def handle_shapes(func: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
    """
    Decorator to normalize inputs to contiguous float64 (N, 3) batches.

    Args:
        func: The function to decorate.

    Returns:
        The wrapped function with shape handling.
        - If input is (3,), returns (3,)
        - If input is (N, 3), returns (N, 3)
    """
    @functools.wraps(func)
    def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> ArrayFloat:
        arr = np.asarray(arr, dtype=np.float64)
        if arr.ndim not in (1, 2):
            raise ValueError(f"Expected a (3,) or (N, 3) array, got {arr.ndim} dimensions")
        arr_in = np.ascontiguousarray(np.atleast_2d(arr))

        if arr_in.shape[-1] != 3:
            raise ValueError(f"Expected last dimension size 3, got {arr_in.shape[-1]}")
        if not np.all(np.isfinite(arr_in)):
            raise ValueError(f"{func.__name__}: inputs must be finite")

        res = func(arr_in, *args, **kwargs)
        _ensure_finite(res, func.__name__)

        if arr.ndim == 1:
            return res[0]
        return res
    return wrapper


# =============================================================================
# 3. LOW-LEVEL MATH KERNELS (Numba Optimized)
# =============================================================================
# NOTE: fastmath=True allows reassociation and relaxed IEEE compliance.
# Results may differ from strict IEEE reference implementations in the last
# few ulps; the strict variants below are available for comparison.

@njit(cache=True, fastmath=True)
def _fast_inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB EOTF (Inverse Gamma).

    Standard: IEC 61966-2-1

    Performance Note:
        Uses an explicit loop instead of `np.where` to avoid allocating a
        boolean mask array.
    """
    out = np.empty_like(srgb)
    srgb_flat = srgb.ravel()
    out_flat = out.ravel()

    for i in range(srgb.size):
        v = srgb_flat[i]
        if v > SRGB_LINEAR_THRESHOLD:
            out_flat[i] = ((v + 0.055) / 1.055) ** 2.4
        else:
            out_flat[i] = v / 12.92
    return out

@njit(cache=True, fastmath=True)
def _xyz_to_lab_f(t: ArrayFloat) -> ArrayFloat:
    """
    Non-linear transfer function f(t) for CIELAB.

    The cube-root response with a linear segment near zero to keep the slope
    finite.
    """
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()

    for i in range(t.size):
        v = t_flat[i]
        if v > LAB_EPSILON:
            out_flat[i] = v ** (1.0/3.0)
        else:
            out_flat[i] = LAB_LINEAR_SLOPE * v + LAB_LINEAR_OFFSET
    return out


# --- Strict IEEE 754 kernel variants (fastmath=False) ---

@njit(cache=True, fastmath=False)
def _fast_inverse_gamma_srgb_strict(srgb: ArrayFloat) -> ArrayFloat:
    """sRGB EOTF - strict IEEE 754 variant."""
    out = np.empty_like(srgb)
    srgb_flat = srgb.ravel()
    out_flat = out.ravel()
    for i in range(srgb.size):
        v = srgb_flat[i]
        if v > SRGB_LINEAR_THRESHOLD:
            out_flat[i] = ((v + 0.055) / 1.055) ** 2.4
        else:
            out_flat[i] = v / 12.92
    return out

@njit(cache=True, fastmath=False)
def _xyz_to_lab_f_strict(t: ArrayFloat) -> ArrayFloat:
    """Lab f(t) - strict IEEE 754 variant."""
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()
    for i in range(t.size):
        v = t_flat[i]
        if v > LAB_EPSILON:
            out_flat[i] = v ** (1.0/3.0)
        else:
            out_flat[i] = LAB_LINEAR_SLOPE * v + LAB_LINEAR_OFFSET
    return out


# --- Kernel dispatchers ---
# Thin wrappers that check the global _STRICT_IEEE flag and delegate to the
# matching compiled variant.

def _inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """Dispatch sRGB EOTF to fast or strict kernel."""
    if _STRICT_IEEE:
        return _fast_inverse_gamma_srgb_strict(srgb)
    return _fast_inverse_gamma_srgb(srgb)

def _lab_f(t: ArrayFloat) -> ArrayFloat:
    """Dispatch Lab f(t) to fast or strict kernel."""
    if _STRICT_IEEE:
        return _xyz_to_lab_f_strict(t)
    return _xyz_to_lab_f(t)


@njit(float64(float64, float64), cache=True, fastmath=True)
def _hue_angle_kernel(b: float, a: float) -> float:
    """
    Hue angle in degrees on [0, 360).

    The a = b = 0 case is branched on before atan2 so an achromatic sample
    always gets hue 0.
    """
    if b == 0.0 and a == 0.0:
        return 0.0
    h = np.arctan2(b, a) * RAD2DEG
    if h < 0.0:
        h += 360.0
    # -tiny + 360 can round up to exactly 360
    if h >= 360.0:
        h -= 360.0
    return h


def hue_angle_deg(a: float, b: float) -> float:
    """Hue angle of the (a, b) vector in degrees, normalized to [0, 360)."""
    return float(_hue_angle_kernel(float(b), float(a)))


# =============================================================================
# 4. COLOR SPACE ENGINE
# =============================================================================

class ColorSpaceEngine:
    """Static utility class for the sRGB -> CIELAB pipeline.

    Architecture Note:
        Each transform provides a public ``@handle_shapes`` decorated API and
        an internal ``_raw`` fast-path that assumes pre-validated (N, 3)
        float64 input.  Convenience pipelines (``srgb_to_xyz``,
        ``srgb_to_lab``) chain the ``_raw`` variants so the shape check and
        the finite guard run once per call.
    """

    # =====================================================================
    #  Internal _raw fast-path methods  (assume validated (N, 3) float64)
    # =====================================================================

    @staticmethod
    def _srgb_to_linear_raw(rgb_array: ArrayFloat, clip: bool = False) -> ArrayFloat:
        """Raw sRGB -> linear RGB.  *rgb_array* must be (N, 3) float64."""
        if clip:
            rgb_array = np.clip(rgb_array, 0.0, 1.0)
        return _inverse_gamma_srgb(rgb_array)

    @staticmethod
    def _linear_to_xyz_raw(linear_array: ArrayFloat) -> ArrayFloat:
        """Raw linear RGB -> XYZ [0..100].  *linear_array* must be (N, 3) float64."""
        return np.dot(linear_array * XYZ_SCALE, M_SRGB_TO_XYZ_T)

    @staticmethod
    def _xyz_to_lab_raw(xyz_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D65) -> ArrayFloat:
        """Raw XYZ -> Lab.  *xyz_array* must be (N, 3) float64."""
        xyz_norm = np.ascontiguousarray(xyz_array / illuminant)
        f_xyz = _lab_f(xyz_norm)

        out = np.empty_like(xyz_array)
        out[..., 0] = 116.0 * f_xyz[..., 1] - 16.0
        out[..., 1] = 500.0 * (f_xyz[..., 0] - f_xyz[..., 1])
        out[..., 2] = 200.0 * (f_xyz[..., 1] - f_xyz[..., 2])
        return out

    @staticmethod
    def _check_illuminant(illuminant: ArrayFloat) -> ArrayFloat:
        white = np.asarray(illuminant, dtype=np.float64)
        if white.shape != (3,):
            raise ValueError(f"Reference white must have shape (3,), got {white.shape}")
        if not np.all(np.isfinite(white)) or np.any(white <= 0.0):
            raise ValueError(f"Reference white must be finite and positive, got {white}")
        return white

    # =====================================================================
    #  Public API  (shape-safe wrappers)
    # =====================================================================

    @staticmethod
    @handle_shapes
    def srgb_to_linear(rgb_array: ArrayFloat, clip: bool = False) -> ArrayFloat:
        """
        Removes the sRGB companding (EOTF).

        Args:
            rgb_array: Gamma-encoded sRGB, shape (N, 3) or (3,), nominally [0, 1].
            clip: If True, clamps input to [0, 1] first.  Out-of-range values
                  are otherwise passed through the curve unchanged.

        Returns:
            Linear RGB, same shape as input.
        """
        return ColorSpaceEngine._srgb_to_linear_raw(rgb_array, clip)

    @staticmethod
    @handle_shapes
    def linear_to_xyz(linear_array: ArrayFloat) -> ArrayFloat:
        """
        Converts linear RGB [0..1] to CIE XYZ [0..100] (D65).

        Args:
            linear_array: Linear RGB, shape (N, 3) or (3,).
        """
        return ColorSpaceEngine._linear_to_xyz_raw(linear_array)

    @staticmethod
    @handle_shapes
    def srgb_to_xyz(rgb_array: ArrayFloat, clip: bool = False) -> ArrayFloat:
        """
        Converts sRGB [0..1] to CIE XYZ [0..100] (D65).

        Args:
            rgb_array: Input sRGB data, shape (N, 3) or (3,).
            clip: If True, clamps input to [0, 1] before applying the EOTF.

        Returns:
            XYZ coordinates, white maps to roughly (95.047, 100.0, 108.883).
        """
        linear = ColorSpaceEngine._srgb_to_linear_raw(rgb_array, clip)
        return ColorSpaceEngine._linear_to_xyz_raw(linear)

    @staticmethod
    @handle_shapes
    def xyz_to_lab(xyz_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D65) -> ArrayFloat:
        """
        Converts CIE XYZ [0..100] to CIELAB.

        Args:
            xyz_array: XYZ data, shape (N, 3) or (3,).
            illuminant: Reference white on the same scale (default D65/2).

        Returns:
            Lab coordinates (L in [0, 100] for in-gamut input).
        """
        white = ColorSpaceEngine._check_illuminant(illuminant)
        return ColorSpaceEngine._xyz_to_lab_raw(xyz_array, white)

    @staticmethod
    @handle_shapes
    def srgb_to_lab(rgb_array: ArrayFloat, clip: bool = False) -> ArrayFloat:
        """
        Full pipeline sRGB -> linear -> XYZ -> Lab (D65).

        Args:
            rgb_array: Input sRGB data, shape (N, 3) or (3,).
            clip: If True, clamps input to [0, 1] before the EOTF.
        """
        linear = ColorSpaceEngine._srgb_to_linear_raw(rgb_array, clip)
        xyz = ColorSpaceEngine._linear_to_xyz_raw(linear)
        return ColorSpaceEngine._xyz_to_lab_raw(xyz, REF_WHITE_D65)


# =============================================================================
# 5. OPTIMIZED METRICS
# =============================================================================

@njit(float64(float64, float64, float64, float64, float64, float64, float64, float64, float64), cache=True, fastmath=True)
def _delta_e_2000_single_opt(L1: float, a1: float, b1: float, L2: float, a2: float, b2: float, k_L: float, k_C: float, k_H: float) -> float:
    """Single-pair CIEDE2000 with parametric factors (Sharma et al. 2005)."""
    C1 = np.sqrt(a1 * a1 + b1 * b1)
    C2 = np.sqrt(a2 * a2 + b2 * b2)
    C_bar = (C1 + C2) * 0.5
    C_bar_7 = C_bar**7
    G = 0.5 * (1.0 - np.sqrt(C_bar_7 / (C_bar_7 + C25_7)))
    scale = 1.0 + G
    a1_p = scale * a1
    a2_p = scale * a2
    C1_p = np.sqrt(a1_p * a1_p + b1 * b1)
    C2_p = np.sqrt(a2_p * a2_p + b2 * b2)
    h1_p = _hue_angle_kernel(b1, a1_p)
    h2_p = _hue_angle_kernel(b2, a2_p)

    dL_p = L2 - L1
    dC_p = C2_p - C1_p
    C_prod = C1_p * C2_p

    dh_p = 0.0
    if C_prod != 0.0:
        diff = h2_p - h1_p
        if abs(diff) <= 180.0: dh_p = diff
        elif diff > 180.0: dh_p = diff - 360.0
        else: dh_p = diff + 360.0
    dH_p = 2.0 * np.sqrt(C_prod) * np.sin((dh_p * 0.5) * DEG2RAD)

    L_bar_p = (L1 + L2) * 0.5
    C_bar_p = (C1_p + C2_p) * 0.5
    h_sum = h1_p + h2_p
    if C_prod == 0.0: h_bar_p = h_sum
    elif abs(h1_p - h2_p) <= 180.0: h_bar_p = h_sum * 0.5
    elif h_sum < 360.0: h_bar_p = (h_sum + 360.0) * 0.5
    else: h_bar_p = (h_sum - 360.0) * 0.5

    T = 1.0 - 0.17 * np.cos((h_bar_p - 30.0) * DEG2RAD) + \
        0.24 * np.cos((2.0 * h_bar_p) * DEG2RAD) + \
        0.32 * np.cos((3.0 * h_bar_p + 6.0) * DEG2RAD) - \
        0.20 * np.cos((4.0 * h_bar_p - 63.0) * DEG2RAD)
    d_theta = 30.0 * np.exp(-((h_bar_p - 275.0) / 25.0)**2)
    C_bar_p_7 = C_bar_p**7
    RC = 2.0 * np.sqrt(C_bar_p_7 / (C_bar_p_7 + C25_7))
    RT = -np.sin((2.0 * d_theta) * DEG2RAD) * RC
    L_term = (L_bar_p - 50.0)**2
    SL = 1.0 + (0.015 * L_term) / np.sqrt(20.0 + L_term)
    SC = 1.0 + 0.045 * C_bar_p
    SH = 1.0 + 0.015 * C_bar_p * T

    P1 = dL_p / (k_L * SL)
    P2 = dC_p / (k_C * SC)
    P3 = dH_p / (k_H * SH)
    radicand = P1 * P1 + P2 * P2 + P3 * P3 + RT * P2 * P3
    # |RT| < 2 keeps this non-negative; clamp rounding noise only
    if radicand < 0.0:
        radicand = 0.0
    return np.sqrt(radicand)

@njit(cache=True, fastmath=True)
def _batch_delta_e_2000(lab1: ArrayFloat, lab2: ArrayFloat, k_L: float, k_C: float, k_H: float) -> ArrayFloat:
    """
    Vectorized loop for CIEDE2000.

    Serial: with the workqueue threading layer a parallel kernel entered
    from several Python threads at once aborts the process.
    """
    n = len(lab1)
    res = np.empty(n, dtype=np.float64)
    for i in range(n):
        res[i] = _delta_e_2000_single_opt(lab1[i, 0], lab1[i, 1], lab1[i, 2], lab2[i, 0], lab2[i, 1], lab2[i, 2], k_L, k_C, k_H)
    return res


class ColorMetrics:
    @staticmethod
    def _prepare_inputs(lab1: ArrayFloat, lab2: ArrayFloat) -> Tuple[ArrayFloat, ArrayFloat]:
        """
        Broadcasting helper.

        ``broadcast_to`` creates read-only strided views; the explicit
        ``ascontiguousarray`` materialises them so the kernel
        always sees dense C-contiguous rows.
        """
        l1 = np.ascontiguousarray(np.atleast_2d(np.asarray(lab1, dtype=np.float64)))
        l2 = np.ascontiguousarray(np.atleast_2d(np.asarray(lab2, dtype=np.float64)))

        if l1.ndim != 2 or l2.ndim != 2 or l1.shape[-1] != 3 or l2.shape[-1] != 3:
            raise ValueError(f"Inputs must have shape (N, 3), got {l1.shape} and {l2.shape}")
        if not (np.all(np.isfinite(l1)) and np.all(np.isfinite(l2))):
            raise ValueError("Lab inputs must be finite")

        if l1.shape[0] != l2.shape[0]:
            if l1.shape[0] == 1: l1 = np.ascontiguousarray(np.broadcast_to(l1, l2.shape))
            elif l2.shape[0] == 1: l2 = np.ascontiguousarray(np.broadcast_to(l2, l1.shape))
            else: raise ValueError(f"Shapes {l1.shape} and {l2.shape} are not broadcastable.")
        return l1, l2

    @staticmethod
    def delta_E_2000(lab1: ArrayFloat, lab2: ArrayFloat,
                     k_L: float = 1.0, k_C: float = 1.0, k_H: float = 1.0,
                     textiles: bool = False) -> Union[ArrayFloat, float]:
        """
        Calculates CIEDE2000 Color Difference.

        The metric is symmetric: swapping ``lab1`` and ``lab2`` gives the same
        value.

        Args:
            lab1: Reference colors, shape (N, 3) or (3,).
            lab2: Sample colors, shape (N, 3) or (3,).
            k_L: Parametric lightness weight (default 1.0).
            k_C: Parametric chroma weight (default 1.0).
            k_H: Parametric hue weight (default 1.0).
            textiles: If True, overrides k_L=2.0, k_C=1.0, k_H=1.0 as per
                      CIE recommendation for textile applications.

        Returns:
            A float when both inputs are single triples, else an (N,) array.
            Supports broadcasting (1 vs N).
        """
        if textiles:
            k_L, k_C, k_H = 2.0, 1.0, 1.0
        k_L, k_C, k_H = validate_weights(k_L, k_C, k_H)
        l1, l2 = ColorMetrics._prepare_inputs(lab1, lab2)
        res = _ensure_finite(_batch_delta_e_2000(l1, l2, k_L, k_C, k_H), "delta_E_2000")
        if np.ndim(lab1) == 1 and np.ndim(lab2) == 1: return float(res[0])
        return res


# =============================================================================
# Validation Block
# =============================================================================
if __name__ == "__main__":
    print("--- Swatch Color Engine Validation ---")

    # 1. Anchor points
    print("1. Testing white / black anchors...")
    anchors = ColorSpaceEngine.srgb_to_lab(np.array([[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]]))
    print(f"   White -> Lab: {anchors[0]} (Expected ~[100, 0, 0])")
    print(f"   Black -> Lab: {anchors[1]} (Expected ~[0, 0, 0])")

    # 2. Shape Safety Test
    print("2. Testing Shape Safety...")
    try:
        ColorSpaceEngine.srgb_to_xyz(np.zeros((10, 5)))
    except ValueError as e:
        print(f"   Caught expected error: {e}")

    # 3. Sharma reference pair #1
    print("3. Testing CIEDE2000 reference pair...")
    de = ColorMetrics.delta_E_2000(np.array([50.0, 2.6772, -79.7751]),
                                   np.array([50.0, 0.0, -82.7485]))
    print(f"   DE2000: {de:.4f} (Expected: 2.0425) "
          f"{'[PASS]' if abs(de - 2.0425) < 1e-4 else '[FAIL]'}")

    # 4. Strict IEEE mode
    print("4. Testing Strict IEEE mode...")
    rgb_in = np.random.rand(1000, 3)
    lab_fast = ColorSpaceEngine.srgb_to_lab(rgb_in)
    set_strict_ieee(True)
    lab_strict = ColorSpaceEngine.srgb_to_lab(rgb_in)
    set_strict_ieee(False)
    ieee_diff = np.max(np.abs(lab_fast - lab_strict))
    print(f"   Max diff (fast vs strict): {ieee_diff:.2e}")

    # 5. Stress Test Benchmark (1 vs 1M)
    print("5. Benchmarking Delta E 2000 (1 vs 1M)...")
    N_bench = 1_000_000
    ref = ColorSpaceEngine.srgb_to_lab(np.random.rand(1, 3))
    sam = ColorSpaceEngine.srgb_to_lab(np.random.rand(N_bench, 3))
    t0 = time.perf_counter()
    _ = ColorMetrics.delta_E_2000(ref, sam)
    t1 = time.perf_counter()
    print(f"   Processed {N_bench:,} pairs in {(t1-t0)*1000:.2f} ms")
