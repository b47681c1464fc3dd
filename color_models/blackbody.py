# -*- coding: utf-8 -*-
"""
SpecRend: Colour rendering of spectra
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: blackbody.py — Planck's law emitter.

    M(λ, T) = c1 · λ^-5 / (exp(c2 / (λ·T)) - 1)

with λ in metres, c1 = 3.74183e-16 W·m² and c2 = 1.4388e-2 m·K.
"""

import numpy as np
from typing import Dict, Final, Optional, Union

from specrend_colorengine import input_validation_enabled

from .emitter import Emitter

__all__ = ["C1_RADIATION", "C2_RADIATION", "blackbody_spectrum", "BlackbodyEmitter"]

C1_RADIATION: Final[float] = 3.74183e-16
C2_RADIATION: Final[float] = 1.4388e-2

ScalarOrArray = Union[float, np.ndarray]


def blackbody_spectrum(temperature: ScalarOrArray, wavelength: ScalarOrArray) -> ScalarOrArray:
    """
    Emittance of a black body at *temperature* (K) and *wavelength* (nm).

    Accepts scalars or broadcastable arrays.  Non-positive input is only
    rejected when input validation is enabled; otherwise it propagates
    as inf / NaN, and overflow of the exponential yields 0.

    Raises:
        ValueError: With validation enabled, if temperature or
            wavelength is <= 0 or NaN.
    """
    if input_validation_enabled():
        if np.any(~(np.asarray(temperature) > 0)):
            raise ValueError(f"Temperature must be > 0 K, got {temperature}")
        if np.any(~(np.asarray(wavelength) > 0)):
            raise ValueError(f"Wavelength must be > 0 nm, got {wavelength}")

    wlm = np.asarray(wavelength, dtype=np.float64) * 1e-9
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        res = (C1_RADIATION * np.power(wlm, -5.0)) / \
            (np.exp(C2_RADIATION / (wlm * temperature)) - 1.0)
    if np.ndim(res) == 0:
        return float(res)
    return res


class BlackbodyEmitter(Emitter):
    """
    Planck radiator usable wherever an emission function is expected.

    The temperature passed by the integrator is used unless the emitter
    was built with a fixed ``temperature`` parameter.

    Examples:
        bb = BlackbodyEmitter()
        bb(6500.0, 550.0)

        fixed = BlackbodyEmitter(temperature=3200.0)
        fixed(0.0, 550.0)  # temperature argument ignored
    """

    def __init__(
        self,
        temperature: Optional[Union[float, int]] = None,
        params: Optional[Dict[str, Union[float, int]]] = None,
        **kwargs: Union[float, int]
    ):
        p = params.copy() if params else {}
        if temperature is not None:
            p['temperature'] = temperature
        p.update(kwargs)
        super().__init__(params=p)

    @property
    def temperature(self) -> Optional[float]:
        """Fixed temperature (K), or None when taken from the caller."""
        return self.params.get('temperature')

    def intensity(self, temperature: float, wavelength: float) -> float:
        t = self.params.get('temperature', temperature)
        return blackbody_spectrum(t, wavelength)
