# -*- coding: utf-8 -*-
"""
SpecRend: Colour rendering of spectra
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Emission models usable as input to the spectral integrator.
"""

from .emitter import Emitter
from .blackbody import BlackbodyEmitter, blackbody_spectrum
from .tabulated import TableEmitter

__all__ = ["Emitter", "BlackbodyEmitter", "blackbody_spectrum", "TableEmitter"]
