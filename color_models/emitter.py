# -*- coding: utf-8 -*-
"""
SpecRend: Colour rendering of spectra
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: emitter.py — Base class for spectral emitters.

An emitter is any callable ``(temperature, wavelength_nm) -> intensity``.
The spectral integrator accepts plain functions as well; this base class
adds the hybrid parameter API (dict-based and keyword parameters, with
``self.params`` as the single source of truth) shared by the concrete
emitters.
"""

import numpy as np
from typing import Dict, Union, Optional, List


class Emitter:
    """
    Base class for emission-intensity functions.

    Subclasses must override ``intensity()``.  Instances are callable with
    the signature expected by ``SpectralIntegrator.spectrum_to_xyz``.

    Attributes:
        params : Dict[str, float]
            Emitter parameters (single source of truth).
    """

    def __init__(
        self,
        params: Optional[Dict[str, Union[float, int]]] = None,
        **kwargs: Union[float, int]
    ):
        """
        Initialize emitter with parameters.

        Args:
            params: Dictionary of emitter parameters.
            **kwargs: Individual parameters (override params dict).

        Examples:
            # Dict-based (good for config files)
            TableEmitter(data, params={'scale': 2.0})

            # Keyword-based
            TableEmitter(data, scale=2.0)
        """
        merged = {**(params or {}), **kwargs}
        self.params: Dict[str, float] = {}
        for k, v in merged.items():
            if not isinstance(v, (int, float, np.number)) or isinstance(v, bool):
                raise TypeError(
                    f"Parameter '{k}' must be numeric, got {type(v).__name__}"
                )
            self.params[k] = float(v)

    def _validate_params(
        self,
        required: Optional[List[str]] = None,
        optional: Optional[Dict[str, float]] = None
    ) -> None:
        """
        Validate and set defaults for parameters.

        Raises:
            ValueError: If a required parameter is missing.
        """
        if required:
            for param in required:
                if param not in self.params:
                    raise ValueError(
                        f"Parameter '{param}' is required for {self.__class__.__name__}."
                    )

        if optional:
            for param, default in optional.items():
                self.params.setdefault(param, default)

    def __call__(self, temperature: float, wavelength: float) -> float:
        return self.intensity(temperature, wavelength)

    def intensity(self, temperature: float, wavelength: float) -> float:
        """Override in subclass: emittance at *wavelength* (nm)."""
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement intensity()"
        )

    def sample(self, temperature: float, wavelengths: np.ndarray) -> np.ndarray:
        """Evaluate the emitter on a wavelength grid (nm)."""
        wl = np.asarray(wavelengths, dtype=np.float64)
        return np.array(
            [self.intensity(temperature, float(w)) for w in wl.ravel()],
            dtype=np.float64,
        ).reshape(wl.shape)

    def get_params(self) -> Dict[str, float]:
        """Return a copy of emitter parameters."""
        return self.params.copy()

    def set_param(self, param_name: str, value: Union[float, int]) -> None:
        """
        Set an existing parameter by name.

        Raises:
            AttributeError: If the parameter does not exist.
            TypeError: If value is not numeric.
        """
        if param_name not in self.params:
            raise AttributeError(
                f"Parameter '{param_name}' does not exist in {self.__class__.__name__}. "
                f"Available parameters: {list(self.params.keys())}"
            )
        if not isinstance(value, (int, float, np.number)) or isinstance(value, bool):
            raise TypeError(
                f"Parameter '{param_name}' must be numeric, got {type(value).__name__}"
            )
        self.params[param_name] = float(value)

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{self.__class__.__name__}({body})"
