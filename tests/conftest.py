# -*- coding: utf-8 -*-
"""Shared fixtures: reference results of the fourmilab blackbody table."""

import pytest

import specrend_colorengine as ce


# Temperature (K) -> (x, y, z), 4 decimals
EXPECTED_XYZ = {
    1000: (0.6528, 0.3444, 0.0028),
    1500: (0.5857, 0.3931, 0.0212),
    2000: (0.5267, 0.4133, 0.0600),
    2500: (0.4770, 0.4137, 0.1093),
    3000: (0.4369, 0.4041, 0.1590),
    3500: (0.4053, 0.3907, 0.2040),
    4000: (0.3805, 0.3768, 0.2428),
    4500: (0.3608, 0.3636, 0.2756),
    5000: (0.3451, 0.3516, 0.3032),
    5500: (0.3325, 0.3411, 0.3265),
    6000: (0.3221, 0.3318, 0.3461),
    6500: (0.3135, 0.3237, 0.3628),
    7000: (0.3064, 0.3166, 0.3770),
    7500: (0.3004, 0.3103, 0.3893),
    8000: (0.2952, 0.3048, 0.4000),
    8500: (0.2908, 0.3000, 0.4093),
    9000: (0.2869, 0.2956, 0.4174),
    9500: (0.2836, 0.2918, 0.4246),
    10000: (0.2807, 0.2884, 0.4310),
}

# Temperature (K) -> constrained, normalised SMPTE RGB, 3 decimals
EXPECTED_SMPTE_RGB = {
    1000: (1.000, 0.007, 0.000),
    1500: (1.000, 0.126, 0.000),
    2000: (1.000, 0.234, 0.010),
    2500: (1.000, 0.349, 0.067),
    3000: (1.000, 0.454, 0.151),
    3500: (1.000, 0.549, 0.254),
    4000: (1.000, 0.635, 0.370),
    4500: (1.000, 0.710, 0.493),
    5000: (1.000, 0.778, 0.620),
    5500: (1.000, 0.837, 0.746),
    6000: (1.000, 0.890, 0.869),
    6500: (1.000, 0.937, 0.988),
    7000: (0.907, 0.888, 1.000),
    7500: (0.827, 0.839, 1.000),
    8000: (0.762, 0.800, 1.000),
    8500: (0.711, 0.766, 1.000),
    9000: (0.668, 0.738, 1.000),
    9500: (0.632, 0.714, 1.000),
    10000: (0.602, 0.693, 1.000),
}


@pytest.fixture(autouse=True)
def _reset_engine_config():
    """Restore the engine toggles after every test."""
    yield
    ce.set_strict_ieee(True)
    ce.set_input_validation(False)
