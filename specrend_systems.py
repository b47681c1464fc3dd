# -*- coding: utf-8 -*-
"""
SpecRend: Colour rendering of spectra
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: specrend_systems.py — Colour systems, white points and presets.

A colour system is defined by the CIE 1931 (x, y) chromaticities of its
three primaries, the chromaticity of its white point and a gamma value.
The z coordinate of every chromaticity is derived as 1 - (x + y) where
it is needed, it is never stored.

Gamma convention:
    ``gamma == GAMMA_REC709`` (0.0) selects the Rec.709 piecewise curve.
    Any other value is used as a power-law exponent, c ** (1 / gamma).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Final, Mapping, Tuple, TypeAlias

__all__ = [
    "Chromaticity",
    "GAMMA_REC709",
    "ILLUMINANT_C",
    "ILLUMINANT_D65",
    "ILLUMINANT_E",
    "ColorSystem",
    "NTSC_SYSTEM",
    "EBU_SYSTEM",
    "SMPTE_SYSTEM",
    "HDTV_SYSTEM",
    "CIE_SYSTEM",
    "REC709_SYSTEM",
    "STANDARD_SYSTEMS",
    "get_color_system",
]

Chromaticity: TypeAlias = Tuple[float, float]

# --- White point chromaticities ---
ILLUMINANT_C: Final[Chromaticity] = (0.3101, 0.3162)
ILLUMINANT_D65: Final[Chromaticity] = (0.3127, 0.3291)
ILLUMINANT_E: Final[Chromaticity] = (1.0 / 3.0, 1.0 / 3.0)

# Sentinel: use the Rec.709 transfer curve instead of a power law
GAMMA_REC709: Final[float] = 0.0


def _as_chromaticity(value: Any, label: str) -> Chromaticity:
    """Coerce a 2-sequence into an (x, y) tuple of floats."""
    try:
        x, y = value
    except (TypeError, ValueError):
        raise ValueError(
            f"{label} must be an (x, y) pair, got {value!r}"
        ) from None
    return float(x), float(y)


@dataclass(slots=True, frozen=True)
class ColorSystem:
    """
    Additive tricolour system: three primaries, a white point and gamma.

    Instances are immutable and hashable so they can key the cached
    XYZ -> RGB matrices of the colour engine.

    Examples:
        # Keyword construction
        cs = ColorSystem("sRGB-ish", (0.64, 0.33), (0.30, 0.60),
                         (0.15, 0.06), ILLUMINANT_D65, gamma=2.2)

        # Config-file style
        cs = ColorSystem.from_dict({
            "name": "custom",
            "red": [0.64, 0.33], "green": [0.30, 0.60],
            "blue": [0.15, 0.06], "white": "D65", "gamma": 0.0,
        })
    """
    name:  str
    red:   Chromaticity
    green: Chromaticity
    blue:  Chromaticity
    white: Chromaticity
    gamma: float = GAMMA_REC709

    def __post_init__(self) -> None:
        # Frozen dataclass: normalise via object.__setattr__
        for label in ("red", "green", "blue", "white"):
            object.__setattr__(
                self, label, _as_chromaticity(getattr(self, label), label)
            )
        if not isinstance(self.gamma, (int, float)) or isinstance(self.gamma, bool):
            raise TypeError(
                f"gamma must be numeric, got {type(self.gamma).__name__}"
            )
        object.__setattr__(self, "gamma", float(self.gamma))

    @property
    def uses_rec709(self) -> bool:
        """True when the Rec.709 transfer curve is selected."""
        return self.gamma == GAMMA_REC709

    @property
    def primaries(self) -> Tuple[Chromaticity, Chromaticity, Chromaticity]:
        return self.red, self.green, self.blue

    def white_xyz(self) -> Tuple[float, float, float]:
        """White point as XYZ with luminance Y scaled to 1."""
        xw, yw = self.white
        return xw / yw, 1.0, (1.0 - (xw + yw)) / yw

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "ColorSystem":
        """
        Build a colour system from a plain mapping.

        ``white`` may be an (x, y) pair or the name of a standard
        illuminant ('C', 'D65', 'E'). ``gamma`` defaults to Rec.709.

        Raises:
            ValueError: If a required key is missing or an illuminant
                name is unknown.
        """
        missing = [k for k in ("red", "green", "blue", "white") if k not in params]
        if missing:
            raise ValueError(f"ColorSystem.from_dict: missing keys {missing}")

        white = params["white"]
        if isinstance(white, str):
            try:
                white = _ILLUMINANTS[white.upper()]
            except KeyError:
                raise ValueError(
                    f"Unknown illuminant '{white}'. "
                    f"Choose from: {list(_ILLUMINANTS.keys())}"
                ) from None

        return cls(
            name=str(params.get("name", "custom")),
            red=params["red"],
            green=params["green"],
            blue=params["blue"],
            white=white,
            gamma=params.get("gamma", GAMMA_REC709),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data representation, inverse of ``from_dict``."""
        return {
            "name": self.name,
            "red": list(self.red),
            "green": list(self.green),
            "blue": list(self.blue),
            "white": list(self.white),
            "gamma": self.gamma,
        }


_ILLUMINANTS: Final[Dict[str, Chromaticity]] = {
    "C": ILLUMINANT_C,
    "D65": ILLUMINANT_D65,
    "E": ILLUMINANT_E,
}

# --- Standard colour systems ---
NTSC_SYSTEM: Final[ColorSystem] = ColorSystem(
    "NTSC", (0.67, 0.33), (0.21, 0.71), (0.14, 0.08), ILLUMINANT_C, GAMMA_REC709)
EBU_SYSTEM: Final[ColorSystem] = ColorSystem(
    "EBU", (0.64, 0.33), (0.29, 0.60), (0.15, 0.06), ILLUMINANT_D65, GAMMA_REC709)
SMPTE_SYSTEM: Final[ColorSystem] = ColorSystem(
    "SMPTE", (0.630, 0.340), (0.310, 0.595), (0.155, 0.070), ILLUMINANT_D65, GAMMA_REC709)
HDTV_SYSTEM: Final[ColorSystem] = ColorSystem(
    "HDTV", (0.670, 0.330), (0.210, 0.710), (0.150, 0.060), ILLUMINANT_D65, GAMMA_REC709)
CIE_SYSTEM: Final[ColorSystem] = ColorSystem(
    "CIE", (0.7355, 0.2645), (0.2658, 0.7243), (0.1669, 0.0085), ILLUMINANT_E, GAMMA_REC709)
REC709_SYSTEM: Final[ColorSystem] = ColorSystem(
    "CIE REC 709", (0.64, 0.33), (0.30, 0.60), (0.15, 0.06), ILLUMINANT_D65, GAMMA_REC709)

STANDARD_SYSTEMS: Final[Dict[str, ColorSystem]] = {
    "NTSC": NTSC_SYSTEM,
    "EBU": EBU_SYSTEM,
    "SMPTE": SMPTE_SYSTEM,
    "HDTV": HDTV_SYSTEM,
    "CIE": CIE_SYSTEM,
    "REC709": REC709_SYSTEM,
}


def get_color_system(name: str) -> ColorSystem:
    """
    Look up a standard colour system by name (case-insensitive).

    'Rec.709', 'REC 709' and 'rec709' all resolve to ``REC709_SYSTEM``.

    Raises:
        KeyError: If *name* is not a standard system.
    """
    key = name.upper().replace(".", "").replace(" ", "").replace("_", "")
    try:
        return STANDARD_SYSTEMS[key]
    except KeyError:
        raise KeyError(
            f"Unknown colour system '{name}'. "
            f"Available systems: {list(STANDARD_SYSTEMS.keys())}"
        ) from None
