"""Test chromaticity conversion, matrix derivation, gamut, normalisation and gamma.

Tests for specrend_colorengine:
    - xy <-> u'v' conversions (fourmilab and exact inverse)
    - XYZ -> RGB matrix: white maps to (1, 1, 1), inverse round trip
    - constrain_rgb / normalize_rgb idempotence
    - Rec.709 and power-law gamma
    - shape handling and IEEE propagation

Run:
    pytest tests/test_colorengine.py -v
"""

import warnings

import numpy as np
import pytest

import specrend_colorengine as ce
from specrend_colorengine import (
    ChromaticityConverter,
    GammaCorrector,
    GamutProcessor,
    Normalizer,
    PrimaryMatrixSolver,
)
from specrend_systems import (
    ColorSystem,
    ILLUMINANT_D65,
    SMPTE_SYSTEM,
    STANDARD_SYSTEMS,
)

REC709_SLOPE = (1.099 * 0.018 ** 0.45 - 0.099) / 0.018


# --- Chromaticity ---

def test_xy_to_uv1976_equal_energy():
    uv = ChromaticityConverter.xy_to_uv1976(np.array([1.0 / 3.0, 1.0 / 3.0]))
    np.testing.assert_allclose(uv, [4.0 / 19.0, 9.0 / 19.0], rtol=1e-14)


def test_uv1976_to_xy_legacy_formula():
    xy = ChromaticityConverter.uv1976_to_xy(np.array([0.2, 0.45]))
    # y = 9v / (6v - 16v + 12)
    np.testing.assert_allclose(xy, [0.3, 0.54], rtol=1e-14)


def test_uv1976_to_xy_exact_inverse():
    xy = ChromaticityConverter.uv1976_to_xy(np.array([0.2, 0.45]), legacy=False)
    np.testing.assert_allclose(xy, [0.3, 0.3], rtol=1e-14)


def test_uv_round_trip():
    uv = np.array([[0.2, 0.45], [0.1978, 0.4683], [0.45, 0.52], [0.16, 0.2]])
    back = ChromaticityConverter.xy_to_uv1976(
        ChromaticityConverter.uv1976_to_xy(uv, legacy=False)
    )
    np.testing.assert_allclose(back, uv, atol=1e-12)


def test_chromaticity_zero_denominator_propagates():
    # -2x + 12y + 3 == 0
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        uv = ChromaticityConverter.xy_to_uv1976([1.5, 0.0])
    assert np.isinf(uv[0])
    assert np.isnan(uv[1])


def test_chromaticity_rejects_bad_shape():
    with pytest.raises(ValueError):
        ChromaticityConverter.xy_to_uv1976(np.zeros((4, 3)))


# --- Primary matrix ---

@pytest.mark.parametrize("name", list(STANDARD_SYSTEMS))
def test_white_point_maps_to_unity(name):
    cs = STANDARD_SYSTEMS[name]
    rgb = PrimaryMatrixSolver.xyz_to_rgb(np.array(cs.white_xyz()), cs)
    np.testing.assert_allclose(rgb, [1.0, 1.0, 1.0], atol=1e-12)


def test_matrix_is_cached_and_read_only():
    m1 = PrimaryMatrixSolver.calc_transform_matrix(SMPTE_SYSTEM)
    m2 = PrimaryMatrixSolver.calc_transform_matrix(SMPTE_SYSTEM)
    assert m1 is m2
    with pytest.raises(ValueError):
        m1[0, 0] = 0.0


def test_xyz_rgb_round_trip():
    xyz = np.array([[0.3135, 0.3237, 0.3628], [0.6528, 0.3444, 0.0028], [0.2, 0.5, 0.3]])
    rgb = PrimaryMatrixSolver.xyz_to_rgb(xyz, SMPTE_SYSTEM)
    np.testing.assert_allclose(PrimaryMatrixSolver.rgb_to_xyz(rgb, SMPTE_SYSTEM), xyz, atol=1e-12)


def test_batch_matches_single():
    xyz = np.random.default_rng(7).random((10, 3))
    batch = PrimaryMatrixSolver.xyz_to_rgb(xyz, SMPTE_SYSTEM)
    assert batch.shape == (10, 3)
    for row_in, row_out in zip(xyz, batch):
        np.testing.assert_array_equal(PrimaryMatrixSolver.xyz_to_rgb(row_in, SMPTE_SYSTEM), row_out)


def test_matches_explicit_matrix_product():
    xyz = np.array([0.3135, 0.3237, 0.3628])
    m = PrimaryMatrixSolver.calc_transform_matrix(SMPTE_SYSTEM)
    np.testing.assert_allclose(PrimaryMatrixSolver.xyz_to_rgb(xyz, SMPTE_SYSTEM), m @ xyz, rtol=1e-14)


def test_degenerate_white_does_not_raise():
    cs = ColorSystem("flat", (0.64, 0.33), (0.30, 0.60), (0.15, 0.06), (0.3, 0.0))
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        m = PrimaryMatrixSolver.calc_transform_matrix(cs)
    assert m.shape == (3, 3)


# --- Gamut ---

def test_inside_gamut():
    assert GamutProcessor.inside_gamut([0.0, 0.5, 1.0])
    assert not GamutProcessor.inside_gamut([-0.01, 0.5, 1.0])
    assert not GamutProcessor.inside_gamut([np.nan, 0.5, 1.0])
    np.testing.assert_array_equal(
        GamutProcessor.inside_gamut([[0.1, 0.2, 0.3], [0.1, -0.2, 0.3]]), [True, False]
    )


def test_constrain_adds_white():
    rgb = GamutProcessor.constrain_rgb([-0.2, 0.5, 1.0])
    np.testing.assert_allclose(rgb, [0.0, 0.7, 1.2])
    assert GamutProcessor.inside_gamut(rgb)


def test_constrain_leaves_in_gamut_untouched():
    rgb = np.array([0.1, 0.0, 0.9])
    np.testing.assert_array_equal(GamutProcessor.constrain_rgb(rgb), rgb)


def test_constrain_is_idempotent():
    rgb = np.random.default_rng(1).normal(size=(50, 3))
    once = GamutProcessor.constrain_rgb(rgb)
    np.testing.assert_array_equal(GamutProcessor.constrain_rgb(once), once)
    assert np.all(GamutProcessor.inside_gamut(once))


def test_clip_absolute():
    np.testing.assert_array_equal(GamutProcessor.clip_absolute([-0.5, 0.5, 1.5]), [0.0, 0.5, 1.0])


# --- Normalisation ---

def test_normalize_scales_brightest_to_one():
    np.testing.assert_allclose(Normalizer.normalize_rgb([0.5, 0.25, 0.1]), [1.0, 0.5, 0.2])


def test_normalize_is_idempotent():
    rgb = Normalizer.normalize_rgb(np.random.default_rng(3).random((20, 3)))
    np.testing.assert_array_equal(Normalizer.normalize_rgb(rgb), rgb)
    np.testing.assert_array_equal(rgb.max(axis=1), 1.0)


@pytest.mark.parametrize("rgb", [[0.0, 0.0, 0.0], [-0.1, -0.5, -1.0]])
def test_normalize_leaves_non_positive(rgb):
    np.testing.assert_array_equal(Normalizer.normalize_rgb(rgb), rgb)


@pytest.mark.parametrize("rgb", [[1.0, np.nan, 2.0], [np.nan, 0.5, 0.25], [0.5, 2.0, np.nan]])
def test_normalize_leaves_nan_rows(rgb):
    # max(R, G, B) is NaN, so no scaling takes place
    np.testing.assert_array_equal(Normalizer.normalize_rgb(rgb), rgb)


def test_normalize_nan_row_does_not_affect_batch():
    out = Normalizer.normalize_rgb([[1.0, np.nan, 2.0], [0.5, 0.25, 0.1]])
    np.testing.assert_array_equal(out[0], [1.0, np.nan, 2.0])
    np.testing.assert_allclose(out[1], [1.0, 0.5, 0.2])


# --- Gamma ---

@pytest.mark.parametrize("c", [0.018, 0.05, 0.5, 1.0])
def test_rec709_upper_segment(c):
    assert GammaCorrector.correct_component(c, 0.0) == pytest.approx(1.099 * c ** 0.45 - 0.099, rel=1e-14)


def test_rec709_lower_segment_legacy():
    assert GammaCorrector.correct_component(0.01, 0.0) == pytest.approx(REC709_SLOPE, rel=1e-14)
    assert GammaCorrector.correct_component(0.0, 0.0) == pytest.approx(REC709_SLOPE, rel=1e-14)


def test_rec709_linear_segment_is_continuous():
    below = GammaCorrector.correct_component(0.018 - 1e-12, 0.0, legacy=False)
    at = GammaCorrector.correct_component(0.018, 0.0, legacy=False)
    assert below == pytest.approx(at, abs=1e-9)
    assert GammaCorrector.correct_component(0.009, 0.0, legacy=False) == pytest.approx(0.009 * REC709_SLOPE)


def test_power_law_gamma():
    cs = ColorSystem("gamma22", (0.64, 0.33), (0.30, 0.60), (0.15, 0.06), ILLUMINANT_D65, 2.2)
    out = GammaCorrector.gamma_correct(np.array([0.25, 0.5, 1.0]), cs)
    np.testing.assert_allclose(out, np.array([0.25, 0.5, 1.0]) ** (1.0 / 2.2), rtol=1e-14)


def test_power_law_negative_is_nan():
    assert np.isnan(GammaCorrector.correct_component(-0.5, 2.2))


def test_gamma_uses_system_setting():
    rgb = np.array([[0.5, 0.01, 1.0]])
    out = GammaCorrector.gamma_correct(rgb, SMPTE_SYSTEM)
    assert out.shape == (1, 3)
    assert out[0, 0] == pytest.approx(1.099 * 0.5 ** 0.45 - 0.099)
    assert out[0, 1] == pytest.approx(REC709_SLOPE)
    assert out[0, 2] == pytest.approx(1.0)


def test_fast_and_strict_gamma_agree():
    rgb = np.random.default_rng(5).random((100, 3))
    strict = GammaCorrector.gamma_correct(rgb, SMPTE_SYSTEM)
    ce.set_strict_ieee(False)
    fast = GammaCorrector.gamma_correct(rgb, SMPTE_SYSTEM)
    np.testing.assert_allclose(fast, strict, rtol=1e-12)


# --- Shapes ---

@pytest.mark.parametrize("bad", [np.zeros(4), np.zeros((5, 2)), np.zeros((2, 2, 3))])
def test_rejects_bad_shapes(bad):
    with pytest.raises(ValueError):
        Normalizer.normalize_rgb(bad)


def test_accepts_sequences():
    out = GamutProcessor.constrain_rgb((1, -1, 0))
    assert isinstance(out, np.ndarray)
    np.testing.assert_array_equal(out, [2.0, 0.0, 1.0])
