# -*- coding: utf-8 -*-
"""
SpecRend: Colour rendering of spectra
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tabulated.py — Emitters defined by a tabulated spectrum.

Supports multiple interpolation methods: linear (NumPy), cubicspline,
pchip, akima and makima (SciPy).  Outside the table, linear holds the
edge values; the SciPy methods extrapolate.
"""

import warnings

import numpy as np
from typing import Callable, Dict, Optional, Sequence, Tuple, Union
from scipy.interpolate import CubicSpline, PchipInterpolator, Akima1DInterpolator

from .emitter import Emitter

__all__ = ["TableEmitter", "INTERPOLATION_METHODS"]

INTERPOLATION_METHODS: Tuple[str, ...] = (
    "linear", "cubicspline", "pchip", "akima", "makima",
)

# Wavelength span sampled by the spectral integrator (nm)
_VISIBLE_SPAN: Tuple[float, float] = (380.0, 780.0)


class TableEmitter(Emitter):
    """
    Emitter with a tabulated spectral power distribution.

    The temperature argument of the emission signature is ignored: the
    table fully defines the spectrum.

    Parameters:
        spd_data: 2-element tuple/list of (wavelength_array_nm, values_array).
        scale: Scaling factor for the tabulated values (default 1.0).
        interpolation_type: One of ``INTERPOLATION_METHODS``.
        params: Dictionary with 'scale' (alternative to individual params).

    Examples:
        spd = ([380, 580, 780], [0.2, 1.0, 0.4])
        lamp = TableEmitter(spd, interpolation_type="pchip")
        lamp(0.0, 500.0)

        # Modify via set_param
        lamp.set_param('scale', 2.0)
    """

    def __init__(
        self,
        spd_data: Tuple[Sequence[float], Sequence[float]],
        scale: Optional[Union[float, int]] = None,
        interpolation_type: str = "linear",
        params: Optional[Dict[str, Union[float, int]]] = None,
        **kwargs: Union[float, int]
    ):
        p = params.copy() if params else {}
        if scale is not None:
            p['scale'] = scale
        p.update(kwargs)

        super().__init__(params=p)
        self._validate_params(optional={'scale': 1.0})

        wvl, vals = spd_data
        wvl = np.asarray(wvl, dtype=np.float64).ravel()
        vals = np.asarray(vals, dtype=np.float64).ravel()
        if wvl.shape != vals.shape:
            raise ValueError(
                f"TableEmitter: wavelength length {wvl.shape[0]} != "
                f"value length {vals.shape[0]}"
            )
        if wvl.size < 2:
            raise ValueError("TableEmitter needs at least two samples.")

        order = np.argsort(wvl)
        self.wavelengths = wvl[order]
        self.values = vals[order]
        if np.any(np.diff(self.wavelengths) <= 0):
            raise ValueError("TableEmitter: wavelengths must be unique.")

        if self.wavelengths[0] > _VISIBLE_SPAN[0] or self.wavelengths[-1] < _VISIBLE_SPAN[1]:
            if interpolation_type == "linear":
                outside = "clamped to the edge values"
            else:
                outside = f"extrapolated ({interpolation_type})"
            warnings.warn(
                f"TableEmitter: table covers {self.wavelengths[0]:.1f}-"
                f"{self.wavelengths[-1]:.1f} nm, values outside are "
                f"{outside}.",
                stacklevel=2,
            )

        self.interpolation_type = interpolation_type
        self._interp = self._build_interpolator(interpolation_type)

    def _build_interpolator(self, interpolation_type: str) -> Callable[[np.ndarray], np.ndarray]:
        """
        Build the interpolant over the stored table.

        Raises:
            ValueError: If *interpolation_type* is unknown.
        """
        w, v = self.wavelengths, self.values
        methods = {
            "linear": lambda: (lambda x: np.interp(x, w, v)),
            "cubicspline": lambda: CubicSpline(w, v, extrapolate=True),
            "pchip": lambda: PchipInterpolator(w, v, extrapolate=True),
            "akima": lambda: Akima1DInterpolator(w, v, method="akima", extrapolate=True),
            "makima": lambda: Akima1DInterpolator(w, v, method="makima", extrapolate=True),
        }
        if interpolation_type not in methods:
            raise ValueError(
                f"Unknown interpolation type '{interpolation_type}'. "
                f"Choose from: {list(methods.keys())}"
            )
        return methods[interpolation_type]()

    @property
    def scale(self) -> float:
        """Scaling factor (read-only convenience accessor)."""
        return self.params['scale']

    def intensity(self, temperature: float, wavelength: float) -> float:
        return self.params['scale'] * float(self._interp(wavelength))

    def sample(self, temperature: float, wavelengths: np.ndarray) -> np.ndarray:
        """Vectorised evaluation on a wavelength grid (nm)."""
        wl = np.asarray(wavelengths, dtype=np.float64)
        return self.params['scale'] * np.asarray(self._interp(wl), dtype=np.float64)
