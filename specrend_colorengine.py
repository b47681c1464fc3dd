# -*- coding: utf-8 -*-
"""
SpecRend: Colour rendering of spectra
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Colour Engine
=============
Numba-compiled stages of the spectrum -> RGB pipeline:

1. Chromaticity conversions between CIE 1931 (x, y) and CIE 1976 (u', v').
2. Derivation of the XYZ -> RGB matrix of a colour system from the
   chromaticities of its primaries and white point.
3. Gamut test and desaturation of out-of-gamut colours.
4. Normalisation of the brightest component to 1.
5. Gamma correction (Rec.709 curve or power law).

IEEE 754 semantics:
    Degenerate input (collinear primaries, zero-luminance white, zero
    denominators) is not rejected. It propagates as inf / NaN through the
    arithmetic. All kernels are compiled with ``error_model="numpy"`` so
    a division by zero yields inf / NaN instead of raising.

References:
    - J. Walker, "Colour Rendering of Spectra", fourmilab.ch (1996).
    - ITU-R BT.709-6 (Rec.709 transfer characteristic).
    - CIE 15:2004 "Colorimetry".
"""

import functools
import numpy as np
from numba import njit
from typing import Tuple, Final, TypeAlias, Callable, Union, Any

from specrend_systems import ColorSystem

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",

    # --- Constants ---
    "REC709_CC",
    "REC709_POWER",
    "REC709_SCALE",
    "REC709_OFFSET",

    # --- Configuration ---
    "set_strict_ieee",
    "set_input_validation",
    "input_validation_enabled",

    # --- Decorators ---
    "handle_shapes",
    "handle_pairs",

    # --- Classes ---
    "ChromaticityConverter",
    "PrimaryMatrixSolver",
    "GamutProcessor",
    "Normalizer",
    "GammaCorrector",
]

# --- Type Aliases ---
# Kernels compile to float64; other dtypes are cast on entry.
ArrayFloat: TypeAlias = np.typing.NDArray[np.floating]

# --- Rec.709 transfer characteristic ---
REC709_CC: Final[float] = 0.018
REC709_POWER: Final[float] = 0.45
REC709_SCALE: Final[float] = 1.099
REC709_OFFSET: Final[float] = 0.099


# --- Runtime Configuration ---
# Strict mode (default) compiles the gamma kernels with fastmath=False so
# that inf / NaN propagate exactly.  Fast mode allows reassociation and
# assumes finite values; results for finite input agree to ~1e-15.
#
#     import specrend_colorengine as ce
#     ce.set_strict_ieee(False)  # fast-math gamma kernels
_STRICT_IEEE: bool = True

# Optional hardening layer: reject non-positive temperatures and
# wavelengths instead of letting them propagate as inf / NaN.
_VALIDATE_INPUTS: bool = False


def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between strict IEEE 754 (default) and fast-math gamma kernels.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)


def set_input_validation(enabled: bool = True) -> None:
    """
    Enable or disable validation of physical inputs.

    When enabled, the spectral integrator and the blackbody emitter raise
    ``ValueError`` for temperatures or wavelengths <= 0.  Results for
    valid input are identical in both modes.

    Args:
        enabled: If True, validate inputs.
    """
    global _VALIDATE_INPUTS
    _VALIDATE_INPUTS = bool(enabled)


def input_validation_enabled() -> bool:
    """Current state of the input validation toggle."""
    return _VALIDATE_INPUTS


# =============================================================================
# 1. SHAPE DECORATORS
# =============================================================================

def _shape_guard(width: int) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Build a decorator normalising inputs to contiguous (N, width) float64.

    Single vectors are treated as batches of one internally and unwrapped
    on return:
        - input (width,)   -> result[0]
        - input (N, width) -> result
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> Any:
            arr = np.asarray(arr, dtype=np.float64)
            arr_in = np.ascontiguousarray(np.atleast_2d(arr))

            if arr_in.ndim != 2 or arr_in.shape[-1] != width:
                raise ValueError(
                    f"Expected shape ({width},) or (N, {width}), got {arr.shape}"
                )

            res = func(arr_in, *args, **kwargs)

            if arr.ndim == 1:
                return res[0]
            return res
        return wrapper
    return decorator


handle_shapes = _shape_guard(3)
handle_pairs = _shape_guard(2)


# =============================================================================
# 2. LOW-LEVEL KERNELS (Numba)
# =============================================================================

@njit(cache=True, fastmath=False, error_model="numpy")
def _xy_to_uv_prime_kernel(xy: ArrayFloat) -> ArrayFloat:
    """
    CIE 1931 (x, y) -> CIE 1976 (u', v').

        u' = 4x / (-2x + 12y + 3)
        v' = 9y / (-2x + 12y + 3)
    """
    n = xy.shape[0]
    out = np.empty_like(xy)
    for i in range(n):
        x = xy[i, 0]
        y = xy[i, 1]
        denom = (-2.0 * x) + (12.0 * y) + 3.0
        out[i, 0] = (4.0 * x) / denom
        out[i, 1] = (9.0 * y) / denom
    return out


@njit(cache=True, fastmath=False, error_model="numpy")
def _uv_prime_to_xy_legacy_kernel(uv_prime: ArrayFloat) -> ArrayFloat:
    """
    CIE 1976 (u', v') -> CIE 1931 (x, y), fourmilab formula.

        x = 9u' / (6u' - 16v' + 12)
        y = 9v' / (6v' - 16v' + 12)

    The y term is not the algebraic inverse of ``_xy_to_uv_prime_kernel``;
    it is kept for output compatibility with the published tables.
    """
    n = uv_prime.shape[0]
    out = np.empty_like(uv_prime)
    for i in range(n):
        up = uv_prime[i, 0]
        vp = uv_prime[i, 1]
        out[i, 0] = (9.0 * up) / ((6.0 * up) - (16.0 * vp) + 12.0)
        out[i, 1] = (9.0 * vp) / ((6.0 * vp) - (16.0 * vp) + 12.0)
    return out


@njit(cache=True, fastmath=False, error_model="numpy")
def _uv_prime_to_xy_kernel(uv_prime: ArrayFloat) -> ArrayFloat:
    """
    CIE 1976 (u', v') -> CIE 1931 (x, y), exact inverse.

        x = 9u' / (6u' - 16v' + 12)
        y = 4v' / (6u' - 16v' + 12)
    """
    n = uv_prime.shape[0]
    out = np.empty_like(uv_prime)
    for i in range(n):
        up = uv_prime[i, 0]
        vp = uv_prime[i, 1]
        denom = (6.0 * up) - (16.0 * vp) + 12.0
        out[i, 0] = (9.0 * up) / denom
        out[i, 1] = (4.0 * vp) / denom
    return out


@njit(cache=True, fastmath=False, error_model="numpy")
def _apply_matrix_kernel(vec: ArrayFloat, m: ArrayFloat) -> ArrayFloat:
    """Row-wise M . v with a fixed left-to-right summation order."""
    n = vec.shape[0]
    out = np.empty_like(vec)
    for i in range(n):
        a = vec[i, 0]
        b = vec[i, 1]
        c = vec[i, 2]
        for r in range(3):
            out[i, r] = (m[r, 0] * a) + (m[r, 1] * b) + (m[r, 2] * c)
    return out


@njit(cache=True, fastmath=False)
def _inside_gamut_kernel(rgb: ArrayFloat) -> np.ndarray:
    """True where all three weights are non-negative (NaN -> False)."""
    n = rgb.shape[0]
    out = np.empty(n, dtype=np.bool_)
    for i in range(n):
        out[i] = rgb[i, 0] >= 0.0 and rgb[i, 1] >= 0.0 and rgb[i, 2] >= 0.0
    return out


@njit(cache=True, fastmath=False)
def _constrain_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """
    Desaturate by adding white: w = -min(0, r, g, b).

    Comparisons are ordered so that a NaN component leaves the row
    untouched.
    """
    n = rgb.shape[0]
    out = rgb.copy()
    for i in range(n):
        r = rgb[i, 0]
        g = rgb[i, 1]
        b = rgb[i, 2]

        w = 0.0 if 0.0 < r else r
        if w >= g:
            w = g
        if w >= b:
            w = b
        w = -w

        if w > 0.0:
            out[i, 0] = r + w
            out[i, 1] = g + w
            out[i, 2] = b + w
    return out


@njit(cache=True, fastmath=False, error_model="numpy")
def _normalize_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """
    Scale each row so its largest component is 1.

    Rows whose maximum is <= 0 or NaN (any NaN component) are kept.
    """
    n = rgb.shape[0]
    out = rgb.copy()
    for i in range(n):
        if np.isnan(rgb[i, 0]) or np.isnan(rgb[i, 1]) or np.isnan(rgb[i, 2]):
            continue

        greatest = rgb[i, 0]
        if rgb[i, 1] > greatest:
            greatest = rgb[i, 1]
        if rgb[i, 2] > greatest:
            greatest = rgb[i, 2]

        if greatest > 0.0:
            out[i, 0] = rgb[i, 0] / greatest
            out[i, 1] = rgb[i, 1] / greatest
            out[i, 2] = rgb[i, 2] / greatest
    return out


@njit(cache=True, fastmath=False, error_model="numpy")
def _correct_component(c: float, gamma: float, legacy: bool) -> float:
    """
    Gamma-correct one linear component.

    gamma == 0 selects Rec.709.  Below the 0.018 knee the fourmilab
    reference returns the slope of the linear segment; ``legacy=False``
    multiplies the slope by ``c``.
    """
    if gamma == 0.0:
        if c < REC709_CC:
            slope = ((REC709_SCALE * REC709_CC ** REC709_POWER) - REC709_OFFSET) / REC709_CC
            if legacy:
                return slope
            return slope * c
        return (REC709_SCALE * c ** REC709_POWER) - REC709_OFFSET
    return c ** (1.0 / gamma)


@njit(cache=True, fastmath=False, error_model="numpy")
def _gamma_kernel_strict(rgb: ArrayFloat, gamma: float, legacy: bool) -> ArrayFloat:
    """Gamma correction, strict IEEE 754 variant."""
    n = rgb.shape[0]
    out = np.empty_like(rgb)
    for i in range(n):
        for j in range(3):
            out[i, j] = _correct_component(rgb[i, j], gamma, legacy)
    return out


@njit(cache=True, fastmath=True, error_model="numpy")
def _gamma_kernel_fast(rgb: ArrayFloat, gamma: float, legacy: bool) -> ArrayFloat:
    """
    Gamma correction, fast-math variant.

    Assumes finite input; NaN handling is not guaranteed.
    """
    n = rgb.shape[0]
    out = np.empty_like(rgb)
    slope = ((REC709_SCALE * REC709_CC ** REC709_POWER) - REC709_OFFSET) / REC709_CC
    for i in range(n):
        for j in range(3):
            c = rgb[i, j]
            if gamma == 0.0:
                if c < REC709_CC:
                    out[i, j] = slope if legacy else slope * c
                else:
                    out[i, j] = (REC709_SCALE * c ** REC709_POWER) - REC709_OFFSET
            else:
                out[i, j] = c ** (1.0 / gamma)
    return out


def _gamma(rgb: ArrayFloat, gamma: float, legacy: bool) -> ArrayFloat:
    """Dispatch gamma correction to the strict or fast kernel."""
    if _STRICT_IEEE:
        return _gamma_kernel_strict(rgb, gamma, legacy)
    return _gamma_kernel_fast(rgb, gamma, legacy)


# =============================================================================
# 3. CHROMATICITY CONVERSION
# =============================================================================

class ChromaticityConverter:
    """CIE 1931 (x, y) <-> CIE 1976 (u', v') chromaticity transforms."""

    @staticmethod
    @handle_pairs
    def xy_to_uv1976(xy_array: ArrayFloat) -> ArrayFloat:
        """
        Converts CIE 1931 (x, y) to CIE 1976 (u', v').

        Args:
            xy_array: Input data, shape (N, 2) or (2,).

        Returns:
            u'v' coordinates, shape (N, 2) or (2,).
        """
        return _xy_to_uv_prime_kernel(xy_array)

    @staticmethod
    @handle_pairs
    def uv1976_to_xy(uv_prime_array: ArrayFloat, legacy: bool = True) -> ArrayFloat:
        """
        Converts CIE 1976 (u', v') to CIE 1931 (x, y).

        Args:
            uv_prime_array: Input data, shape (N, 2) or (2,).
            legacy: If True (default), reproduce the fourmilab formula,
                    whose y term uses 6v' in the denominator.  If False,
                    use the exact inverse of ``xy_to_uv1976``.

        Returns:
            xy coordinates, shape (N, 2) or (2,).
        """
        if legacy:
            return _uv_prime_to_xy_legacy_kernel(uv_prime_array)
        return _uv_prime_to_xy_kernel(uv_prime_array)


# =============================================================================
# 4. PRIMARY MATRIX DERIVATION
# =============================================================================

@functools.lru_cache(maxsize=32)
def _get_cached_rgb_matrix(cs: ColorSystem) -> ArrayFloat:
    """
    Cached worker for the XYZ -> RGB matrix of a colour system.

    Derivation:
        XYZ = P . RGB with P the column matrix of primary (x, y, z).
        The unscaled inverse is the cofactor matrix of P.  Each row is
        then divided by its white-scaling factor so the white point
        (luminance Y = 1) maps to RGB = (1, 1, 1).
    """
    (xr, yr), (xg, yg), (xb, yb) = (
        np.asarray(p, dtype=np.float64) for p in cs.primaries
    )
    xw, yw = np.asarray(cs.white, dtype=np.float64)

    with np.errstate(divide="ignore", invalid="ignore"):
        zr = 1.0 - (xr + yr)
        zg = 1.0 - (xg + yg)
        zb = 1.0 - (xb + yb)
        zw = 1.0 - (xw + yw)

        # xyz -> rgb matrix, before scaling to white
        cof = np.array([
            [(yg * zb) - (yb * zg), (xb * zg) - (xg * zb), (xg * yb) - (xb * yg)],
            [(yb * zr) - (yr * zb), (xr * zb) - (xb * zr), (xb * yr) - (xr * yb)],
            [(yr * zg) - (yg * zr), (xg * zr) - (xr * zg), (xr * yg) - (xg * yr)],
        ], dtype=np.float64)

        # White scaling factors; dividing by yw scales white luminance to 1
        w_scale = ((cof[:, 0] * xw) + (cof[:, 1] * yw) + (cof[:, 2] * zw)) / yw

        m = cof / w_scale[:, np.newaxis]

    m.setflags(write=False)
    return m


@functools.lru_cache(maxsize=32)
def _get_cached_xyz_matrix(cs: ColorSystem) -> ArrayFloat:
    """Cached inverse (RGB -> XYZ) of ``_get_cached_rgb_matrix``."""
    m = np.linalg.inv(_get_cached_rgb_matrix(cs))
    m.setflags(write=False)
    return m


class PrimaryMatrixSolver:
    """Linear transforms between CIE XYZ and the RGB of a colour system."""

    @staticmethod
    def calc_transform_matrix(cs: ColorSystem) -> ArrayFloat:
        """
        Computes the XYZ -> RGB matrix of a colour system.

        Args:
            cs: Colour system (primaries and white point).

        Returns:
            Read-only 3x3 matrix M with RGB = M . XYZ.  Collinear
            primaries or a white point with y == 0 give inf / NaN entries.
        """
        return _get_cached_rgb_matrix(cs)

    @staticmethod
    def calc_inverse_matrix(cs: ColorSystem) -> ArrayFloat:
        """
        Computes the RGB -> XYZ matrix of a colour system.

        Raises:
            numpy.linalg.LinAlgError: If the forward matrix is singular.
        """
        return _get_cached_xyz_matrix(cs)

    @staticmethod
    @handle_shapes
    def xyz_to_rgb(xyz_array: ArrayFloat, cs: ColorSystem) -> ArrayFloat:
        """
        Determines the primary weights reproducing a chromaticity.

        Colours outside the triangle spanned by the primaries come out
        with one or more negative weights; see ``GamutProcessor``.

        Args:
            xyz_array: XYZ data, shape (N, 3) or (3,).
            cs: Target colour system.

        Returns:
            Linear RGB, shape (N, 3) or (3,).
        """
        return _apply_matrix_kernel(xyz_array, _get_cached_rgb_matrix(cs))

    @staticmethod
    @handle_shapes
    def rgb_to_xyz(rgb_array: ArrayFloat, cs: ColorSystem) -> ArrayFloat:
        """Converts linear RGB of a colour system back to XYZ."""
        return _apply_matrix_kernel(rgb_array, _get_cached_xyz_matrix(cs))


# =============================================================================
# 5. GAMUT, NORMALISATION & GAMMA
# =============================================================================

class GamutProcessor:
    """Gamut test and desaturation of linear RGB weights."""

    @staticmethod
    @handle_shapes
    def inside_gamut(rgb: ArrayFloat) -> Union[bool, np.ndarray]:
        """
        Tests whether colours lie within the gamut of their primaries.

        This amounts to testing that all primary weights are >= 0.

        Returns:
            bool for a single triple, bool array of shape (N,) otherwise.
        """
        return _inside_gamut_kernel(rgb)

    @staticmethod
    @handle_shapes
    def constrain_rgb(rgb: ArrayFloat) -> ArrayFloat:
        """
        Desaturates out-of-gamut colours by adding white.

        Equal parts of R, G and B are added until the most negative
        weight reaches exactly zero.  In-gamut colours are returned
        unchanged, so the operation is idempotent.
        """
        return _constrain_kernel(rgb)

    @staticmethod
    @handle_shapes
    def clip_absolute(rgb: ArrayFloat) -> ArrayFloat:
        """Hard clip to [0, 1]."""
        return np.clip(rgb, 0.0, 1.0)


class Normalizer:
    """Brightness normalisation of linear RGB."""

    @staticmethod
    @handle_shapes
    def normalize_rgb(rgb: ArrayFloat) -> ArrayFloat:
        """
        Scales RGB so the most intense component equals 1.

        Triples whose largest component is <= 0, or that contain NaN,
        are returned unchanged.
        """
        return _normalize_kernel(rgb)


class GammaCorrector:
    """Linear -> non-linear transfer according to a colour system."""

    @staticmethod
    def correct_component(c: float, gamma: float, legacy: bool = True) -> float:
        """
        Gamma-corrects a single linear component.

        Args:
            c: Linear component value (not clamped).
            gamma: ``GAMMA_REC709`` (0.0) or a power-law exponent.
            legacy: Rec.709 segment convention, see ``gamma_correct``.
        """
        return float(_correct_component(float(c), float(gamma), bool(legacy)))

    @staticmethod
    @handle_shapes
    def gamma_correct(rgb: ArrayFloat, cs: ColorSystem, legacy: bool = True) -> ArrayFloat:
        """
        Transforms linear RGB into the non-linear encoding of ``cs``.

        Rec.709 (``cs.gamma == 0``):
            c >= 0.018: 1.099 * c**0.45 - 0.099
            c <  0.018: (1.099 * 0.018**0.45 - 0.099) / 0.018, the slope
                        of the linear segment.  With ``legacy=False`` the
                        slope is multiplied by c.
        Power law: c ** (1 / gamma).

        Values are not clamped; negative input under a fractional power
        yields NaN.

        Args:
            rgb: Linear RGB, shape (N, 3) or (3,).
            cs: Colour system supplying the gamma value.
            legacy: Keep the fourmilab behaviour below the Rec.709 knee.

        Returns:
            Non-linear RGB, shape (N, 3) or (3,).
        """
        return _gamma(rgb, cs.gamma, bool(legacy))
