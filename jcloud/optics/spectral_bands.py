"""
Spectral band bookkeeping shared by the optics components

A `SpectralBandSet` holds the wavenumber limits of the spectral bands and the
g-point intervals that belong to each band. Optics schemes inherit from it so
that their output is always tied to a fixed set of bands.
"""

import logging

import jax.numpy as jnp
import numpy as np

logger = logging.getLogger(__name__)


class SpectralBandSet:
    """Wavenumber and g-point limits of a set of spectral bands."""

    def __init__(
        self,
        band_lims_wvn,
        band_lims_gpt=None,
    ):
        """
        Args:
            band_lims_wvn: Band limits in wavenumber [cm⁻¹], shape (nbnd, 2)
            band_lims_gpt: Optional 1-based, inclusive g-point limits of each
                band, shape (nbnd, 2). Defaults to one g-point per band.
        """
        band_lims_wvn = np.asarray(band_lims_wvn, dtype=float)
        if band_lims_wvn.ndim != 2 or band_lims_wvn.shape[1] != 2:
            raise ValueError(
                f"Band limits must have shape (nbnd, 2), got {band_lims_wvn.shape}")
        if band_lims_wvn.shape[0] < 1:
            raise ValueError("At least one spectral band is required")
        if np.any(band_lims_wvn < 0.0):
            raise ValueError("Band wavenumber limits must be non-negative")
        if np.any(band_lims_wvn[:, 1] < band_lims_wvn[:, 0]):
            raise ValueError("Band upper wavenumber limits must not be below the lower limits")

        nbnd = band_lims_wvn.shape[0]
        if band_lims_gpt is None:
            band_lims_gpt = np.stack([np.arange(1, nbnd + 1)] * 2, axis=1)
        band_lims_gpt = np.asarray(band_lims_gpt, dtype=int)
        if band_lims_gpt.shape != (nbnd, 2):
            raise ValueError(
                f"G-point limits must have shape ({nbnd}, 2), got {band_lims_gpt.shape}")
        if np.any(band_lims_gpt[:, 1] < band_lims_gpt[:, 0]):
            raise ValueError("Each band must contain at least one g-point")
        # Bands must cover the g-points 1..ngpt contiguously.
        expected_start = np.concatenate([[1], band_lims_gpt[:-1, 1] + 1])
        if np.any(band_lims_gpt[:, 0] != expected_start):
            raise ValueError(
                f"G-point limits must be contiguous starting from 1, got {band_lims_gpt.tolist()}")

        self._band_lims_wvn = band_lims_wvn
        self._band_lims_gpt = band_lims_gpt
        logger.debug("Spectral band set with %d bands and %d g-points", nbnd, self.ngpt())

    def nband(self) -> int:
        """Number of spectral bands."""
        return self._band_lims_wvn.shape[0]

    def ngpt(self) -> int:
        """Number of g-points over all bands."""
        return int(self._band_lims_gpt[-1, 1])

    @property
    def band_lims_wavenumber(self) -> jnp.ndarray:
        """Band limits in wavenumber [cm⁻¹], shape (nbnd, 2)."""
        return jnp.asarray(self._band_lims_wvn)

    @property
    def band_lims_wavelength(self) -> jnp.ndarray:
        """Band limits in wavelength [cm], shape (nbnd, 2).

        A zero wavenumber limit maps to a zero wavelength, as in RRTMGP.
        """
        wvn = self._band_lims_wvn
        safe_wvn = np.where(wvn > 0.0, wvn, 1.0)
        return jnp.asarray(np.where(wvn > 0.0, 1.0 / safe_wvn, 0.0))

    @property
    def band_lims_gpt(self) -> jnp.ndarray:
        """1-based, inclusive g-point limits of each band, shape (nbnd, 2)."""
        return jnp.asarray(self._band_lims_gpt)

    def gpt2band(self) -> jnp.ndarray:
        """Zero-based band index of each g-point, shape (ngpt,)."""
        counts = self._band_lims_gpt[:, 1] - self._band_lims_gpt[:, 0] + 1
        return jnp.asarray(np.repeat(np.arange(self.nband()), counts))

    def expand(self, band_values: jnp.ndarray, axis: int = -1) -> jnp.ndarray:
        """Repeat per-band values onto the g-points of each band.

        Args:
            band_values: Array with a band axis of length nband()
            axis: The band axis

        Returns:
            Array with the band axis replaced by a g-point axis of length ngpt()
        """
        if band_values.shape[axis] != self.nband():
            raise ValueError(
                f"Expected {self.nband()} bands along axis {axis}, got {band_values.shape[axis]}")
        return jnp.take(band_values, self.gpt2band(), axis=axis)
