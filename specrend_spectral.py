# -*- coding: utf-8 -*-
"""
SpecRend: Colour rendering of spectra
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Spectral Pipeline
=================
Integration of an emission spectrum against the CIE 1931 2° standard
observer (380-780 nm, 5 nm steps) and the full spectrum -> RGB chain:

    emitter -> XYZ -> linear RGB -> constrain -> normalise -> gamma

Normalisation Convention:
    The integrated tristimulus values are divided by X + Y + Z, so the
    result is the chromaticity triple (x, y, z) with x + y + z = 1, not
    absolute radiometric XYZ.  An emitter that is zero everywhere gives
    NaN in all three components.
"""

import numpy as np
from typing import Callable, Final, Iterable, List, Sequence, Tuple, TypeAlias

from specrend_colorengine import (
    ArrayFloat,
    GammaCorrector,
    GamutProcessor,
    Normalizer,
    PrimaryMatrixSolver,
    input_validation_enabled,
)
from specrend_systems import ColorSystem, SMPTE_SYSTEM
from color_models import blackbody_spectrum

__all__ = [
    "EmissionFunction",
    "WAVELENGTHS_NM",
    "CIE_COLOUR_MATCH",
    "SpectralIntegrator",
    "SpectralPipeline",
    "spectrum_to_xyz",
    "blackbody_table",
]

# (temperature K, wavelength nm) -> emittance, arbitrary units
EmissionFunction: TypeAlias = Callable[[float, float], float]

# --- Sampling grid ---
_WL_START: Final[float] = 380.0
_WL_STEP: Final[float] = 5.0
_WL_COUNT: Final[int] = 81

WAVELENGTHS_NM: Final[ArrayFloat] = _WL_START + _WL_STEP * np.arange(_WL_COUNT, dtype=np.float64)
WAVELENGTHS_NM.setflags(write=False)

# CIE 1931 colour matching functions (x̄, ȳ, z̄), 380-780 nm in 5 nm steps
CIE_COLOUR_MATCH: Final[ArrayFloat] = np.array([
    [0.0014, 0.0000, 0.0065], [0.0022, 0.0001, 0.0105], [0.0042, 0.0001, 0.0201],
    [0.0076, 0.0002, 0.0362], [0.0143, 0.0004, 0.0679], [0.0232, 0.0006, 0.1102],
    [0.0435, 0.0012, 0.2074], [0.0776, 0.0022, 0.3713], [0.1344, 0.0040, 0.6456],
    [0.2148, 0.0073, 1.0391], [0.2839, 0.0116, 1.3856], [0.3285, 0.0168, 1.6230],
    [0.3483, 0.0230, 1.7471], [0.3481, 0.0298, 1.7826], [0.3362, 0.0380, 1.7721],
    [0.3187, 0.0480, 1.7441], [0.2908, 0.0600, 1.6692], [0.2511, 0.0739, 1.5281],
    [0.1954, 0.0910, 1.2876], [0.1421, 0.1126, 1.0419], [0.0956, 0.1390, 0.8130],
    [0.0580, 0.1693, 0.6162], [0.0320, 0.2080, 0.4652], [0.0147, 0.2586, 0.3533],
    [0.0049, 0.3230, 0.2720], [0.0024, 0.4073, 0.2123], [0.0093, 0.5030, 0.1582],
    [0.0291, 0.6082, 0.1117], [0.0633, 0.7100, 0.0782], [0.1096, 0.7932, 0.0573],
    [0.1655, 0.8620, 0.0422], [0.2257, 0.9149, 0.0298], [0.2904, 0.9540, 0.0203],
    [0.3597, 0.9803, 0.0134], [0.4334, 0.9950, 0.0087], [0.5121, 1.0000, 0.0057],
    [0.5945, 0.9950, 0.0039], [0.6784, 0.9786, 0.0027], [0.7621, 0.9520, 0.0021],
    [0.8425, 0.9154, 0.0018], [0.9163, 0.8700, 0.0017], [0.9786, 0.8163, 0.0014],
    [1.0263, 0.7570, 0.0011], [1.0567, 0.6949, 0.0010], [1.0622, 0.6310, 0.0008],
    [1.0456, 0.5668, 0.0006], [1.0026, 0.5030, 0.0003], [0.9384, 0.4412, 0.0002],
    [0.8544, 0.3810, 0.0002], [0.7514, 0.3210, 0.0001], [0.6424, 0.2650, 0.0000],
    [0.5419, 0.2170, 0.0000], [0.4479, 0.1750, 0.0000], [0.3608, 0.1382, 0.0000],
    [0.2835, 0.1070, 0.0000], [0.2187, 0.0816, 0.0000], [0.1649, 0.0610, 0.0000],
    [0.1212, 0.0446, 0.0000], [0.0874, 0.0320, 0.0000], [0.0636, 0.0232, 0.0000],
    [0.0468, 0.0170, 0.0000], [0.0329, 0.0119, 0.0000], [0.0227, 0.0082, 0.0000],
    [0.0158, 0.0057, 0.0000], [0.0114, 0.0041, 0.0000], [0.0081, 0.0029, 0.0000],
    [0.0058, 0.0021, 0.0000], [0.0041, 0.0015, 0.0000], [0.0029, 0.0010, 0.0000],
    [0.0020, 0.0007, 0.0000], [0.0014, 0.0005, 0.0000], [0.0010, 0.0004, 0.0000],
    [0.0007, 0.0002, 0.0000], [0.0005, 0.0002, 0.0000], [0.0003, 0.0001, 0.0000],
    [0.0002, 0.0001, 0.0000], [0.0002, 0.0001, 0.0000], [0.0001, 0.0000, 0.0000],
    [0.0001, 0.0000, 0.0000], [0.0001, 0.0000, 0.0000], [0.0000, 0.0000, 0.0000],
], dtype=np.float64)
CIE_COLOUR_MATCH.setflags(write=False)


def _normalise_sum(acc: ArrayFloat) -> ArrayFloat:
    """Divide by X + Y + Z; a zero sum gives NaN."""
    total = acc[0] + acc[1] + acc[2]
    with np.errstate(divide="ignore", invalid="ignore"):
        return acc / total


class SpectralIntegrator:
    """Numeric integration of emission spectra against the CIE 1931 observer."""

    @staticmethod
    def spectrum_to_xyz(temperature: float, emit: EmissionFunction) -> ArrayFloat:
        """
        Chromaticity of a light source with emission function *emit*.

        *emit* is called synchronously with ``(temperature, λ)`` for
        λ = 380, 385, ..., 780 nm and returns the emittance at that
        wavelength in arbitrary units.

        Args:
            temperature: Passed through to *emit* (K for blackbodies).
            emit: Emission function, e.g. ``blackbody_spectrum``.

        Returns:
            (x, y, z) as a (3,) float64 array with x + y + z = 1.

        Raises:
            ValueError: With input validation enabled, if temperature <= 0.
        """
        if input_validation_enabled() and not temperature > 0:
            raise ValueError(f"Temperature must be > 0 K, got {temperature}")

        acc = np.zeros(3, dtype=np.float64)
        for i in range(_WL_COUNT):
            me = emit(temperature, _WL_START + _WL_STEP * i)
            acc += me * CIE_COLOUR_MATCH[i]
        return _normalise_sum(acc)

    @staticmethod
    def integrate_samples(samples: Sequence[float]) -> ArrayFloat:
        """
        Chromaticity of an emission spectrum sampled on ``WAVELENGTHS_NM``.

        Args:
            samples: 81 emittance values, 380-780 nm in 5 nm steps.

        Returns:
            (x, y, z) as a (3,) float64 array with x + y + z = 1.
        """
        s = np.asarray(samples, dtype=np.float64)
        if s.shape != (_WL_COUNT,):
            raise ValueError(
                f"Expected {_WL_COUNT} samples (380-780 nm, 5 nm), got shape {s.shape}"
            )
        acc = np.zeros(3, dtype=np.float64)
        for i in range(_WL_COUNT):
            acc += s[i] * CIE_COLOUR_MATCH[i]
        return _normalise_sum(acc)


def spectrum_to_xyz(temperature: float, emit: EmissionFunction) -> ArrayFloat:
    """Module-level alias of ``SpectralIntegrator.spectrum_to_xyz``."""
    return SpectralIntegrator.spectrum_to_xyz(temperature, emit)


class SpectralPipeline:
    @staticmethod
    def spectrum_to_rgb(
        temperature: float,
        emit: EmissionFunction,
        cs: ColorSystem,
        gamma: bool = False,
        legacy: bool = True,
    ) -> ArrayFloat:
        """
        Displayable RGB of a light source in colour system *cs*.

        Chain: XYZ -> RGB(cs) -> constrain -> normalise [-> gamma].

        Args:
            temperature: Passed through to *emit*.
            emit: Emission function.
            cs: Target colour system.
            gamma: If True, apply the gamma correction of *cs*.
            legacy: Rec.709 segment convention, see
                    ``GammaCorrector.gamma_correct``.

        Returns:
            RGB as a (3,) float64 array.
        """
        xyz = SpectralIntegrator.spectrum_to_xyz(temperature, emit)
        rgb = PrimaryMatrixSolver.xyz_to_rgb(xyz, cs)
        rgb = GamutProcessor.constrain_rgb(rgb)
        rgb = Normalizer.normalize_rgb(rgb)
        if gamma:
            rgb = GammaCorrector.gamma_correct(rgb, cs, legacy=legacy)
        return rgb


def blackbody_table(
    cs: ColorSystem = SMPTE_SYSTEM,
    temperatures: Iterable[float] = range(1000, 10001, 500),
    emit: EmissionFunction = blackbody_spectrum,
) -> List[Tuple[float, ArrayFloat, ArrayFloat]]:
    """
    Rows of (temperature, xyz, rgb) for manual inspection.

    rgb is constrained and normalised but not gamma corrected, matching
    the published fourmilab table.
    """
    rows = []
    for t in temperatures:
        t = float(t)
        xyz = SpectralIntegrator.spectrum_to_xyz(t, emit)
        rgb = SpectralPipeline.spectrum_to_rgb(t, emit, cs)
        rows.append((t, xyz, rgb))
    return rows


# =============================================================================
# Reference Table
# =============================================================================
if __name__ == "__main__":
    from __about__ import metadata_summary

    meta = metadata_summary()
    print(f"--- {meta['title']} {meta['version']}: blackbody colours ---")
    print(f"    Colour system: {SMPTE_SYSTEM.name}")
    print("    Temperature       x      y      z       R     G     B")
    print("    -----------    ------ ------ ------   ----- ----- -----")
    for t, xyz, rgb in blackbody_table(SMPTE_SYSTEM):
        in_gamut = GamutProcessor.inside_gamut(
            PrimaryMatrixSolver.xyz_to_rgb(xyz, SMPTE_SYSTEM)
        )
        print(f"       {t:5.0f} K      {xyz[0]:.4f} {xyz[1]:.4f} {xyz[2]:.4f}   "
              f"{rgb[0]:.3f} {rgb[1]:.3f} {rgb[2]:.3f}"
              f"{'' if in_gamut else ' (Approximation)'}")
