"""
Unit tests for spectral band bookkeeping
"""

import jax.numpy as jnp
import pytest

from jcloud.optics.spectral_bands import SpectralBandSet

LW_BAND_LIMITS = ((10.0, 350.0), (350.0, 500.0), (500.0, 2500.0))


def test_band_counts():
    """Test the number of bands and default g-points"""
    bands = SpectralBandSet(LW_BAND_LIMITS)

    assert bands.nband() == 3
    assert bands.ngpt() == 3
    assert jnp.array_equal(bands.band_lims_gpt, jnp.array([[1, 1], [2, 2], [3, 3]]))
    assert jnp.allclose(bands.band_lims_wavenumber, jnp.array(LW_BAND_LIMITS))


def test_band_lims_wavelength():
    """Test conversion of band limits to wavelength in cm"""
    bands = SpectralBandSet(((0.0, 10.0), (10.0, 1000.0)))

    wavelength = bands.band_lims_wavelength

    assert jnp.allclose(wavelength[0], jnp.array([0.0, 0.1]))
    assert jnp.allclose(wavelength[1], jnp.array([0.1, 0.001]))


def test_gpoint_mapping_and_expand():
    """Test g-point to band mapping and expansion of band values"""
    bands = SpectralBandSet(LW_BAND_LIMITS, band_lims_gpt=((1, 2), (3, 3), (4, 7)))

    assert bands.ngpt() == 7
    assert jnp.array_equal(bands.gpt2band(), jnp.array([0, 0, 1, 2, 2, 2, 2]))

    band_values = jnp.arange(6.0).reshape(2, 3)
    expanded = bands.expand(band_values)
    assert expanded.shape == (2, 7)
    assert jnp.array_equal(expanded[1], jnp.array([3.0, 3.0, 4.0, 5.0, 5.0, 5.0, 5.0]))

    with pytest.raises(ValueError, match="Expected 3 bands"):
        bands.expand(jnp.ones((2, 4)))


@pytest.mark.parametrize("band_lims, message", [
    ([10.0, 350.0], "shape"),
    ([(10.0, 350.0, 500.0)], "shape"),
    ([(-10.0, 350.0)], "non-negative"),
    ([(350.0, 10.0)], "below"),
])
def test_invalid_band_limits(band_lims, message):
    """Test band limit validation"""
    with pytest.raises(ValueError, match=message):
        SpectralBandSet(band_lims)


@pytest.mark.parametrize("band_lims_gpt, message", [
    (((1, 2), (3, 4)), "shape"),
    (((1, 2), (4, 5), (6, 6)), "contiguous"),
    (((2, 2), (3, 3), (4, 4)), "contiguous"),
    (((1, 2), (3, 2), (3, 4)), "at least one"),
])
def test_invalid_gpoint_limits(band_lims_gpt, message):
    """Test g-point limit validation"""
    with pytest.raises(ValueError, match=message):
        SpectralBandSet(LW_BAND_LIMITS, band_lims_gpt=band_lims_gpt)
