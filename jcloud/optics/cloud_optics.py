"""
Cloud optical properties from particle-size lookup tables

Liquid and ice optical properties are interpolated linearly in effective
particle size from the RRTMGP cloud lookup tables, scaled by the condensate
path, and combined into either a two-stream (tau, ssa, g) or an
absorption-only (tau) representation.

All kernels are vectorized over columns, layers and bands, so every
(column, layer, band) cell is computed independently.
"""

import logging
from collections.abc import Mapping
from functools import partial
from typing import Any, Optional, Tuple, Type, Union

import jax
import jax.numpy as jnp

from jcloud.optics import lookup_cloud_optics
from jcloud.optics.lookup_cloud_optics import IceRoughness, LookupCloudOptics, ParticleSizeTable
from jcloud.optics.optical_props import OpticalProps1scl, OpticalProps2str
from jcloud.optics.parameters import CloudOpticsParameters
from jcloud.optics.spectral_bands import SpectralBandSet

OpticalProps = Union[OpticalProps1scl, OpticalProps2str]

logger = logging.getLogger(__name__)


@partial(jax.jit, static_argnames=['nsteps'])
def table_index_and_fraction(
    size: jnp.ndarray,
    nsteps: int,
    step_size: float,
    lower_bound: float,
) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """
    Locate particle sizes on a uniform table grid.

    The lower grid index is clamped to [0, nsteps - 2] so that both bracketing
    rows always exist. The fraction is not clamped: sizes outside the table
    extrapolate linearly from the first or last pair of rows.

    Args:
        size: Particle sizes [ncol, nlay]
        nsteps: Number of table rows
        step_size: Grid spacing of the table
        lower_bound: Particle size of the first table row

    Returns:
        Tuple of (zero-based lower row index, fractional offset from that row)
    """
    raw = (size - lower_bound) / step_size
    index = jnp.clip(jnp.floor(raw), 0, nsteps - 2)
    fint = raw - index
    return index.astype(jnp.int32), fint


@partial(jax.jit, static_argnames=['nsteps'])
def compute_from_table(
    mask: jnp.ndarray,
    size: jnp.ndarray,
    nsteps: int,
    step_size: float,
    lower_bound: float,
    table: jnp.ndarray,
) -> jnp.ndarray:
    """
    Interpolate a lookup table linearly in particle size.

    Args:
        mask: Cells where the phase is present [ncol, nlay]
        size: Particle sizes [ncol, nlay]
        nsteps: Number of table rows
        step_size: Grid spacing of the table
        lower_bound: Particle size of the first table row
        table: Lookup table [nsteps, nbnd]

    Returns:
        Interpolated values [ncol, nlay, nbnd], zero where `mask` is False
    """
    index, fint = table_index_and_fraction(size, nsteps, step_size, lower_bound)
    lower = table[index]
    upper = table[index + 1]
    out = lower + fint[..., jnp.newaxis] * (upper - lower)
    return jnp.where(mask[..., jnp.newaxis], out, jnp.zeros_like(out))


def compute_phase_optics(
    table: ParticleSizeTable,
    mask: jnp.ndarray,
    size: jnp.ndarray,
    path: jnp.ndarray,
    props_type: Type[OpticalProps] = OpticalProps2str,
    clip_size_to_lower_bound: bool = False,
) -> OpticalProps:
    """
    Optical properties of one condensate phase.

    Extinction is always interpolated; single-scattering albedo and asymmetry
    are only interpolated for the two-stream representation. The optical depth
    is the interpolated extinction times the condensate path in every band.

    Args:
        table: Lookup table of the phase
        mask: Cells where the phase is present [ncol, nlay]
        size: Effective particle size [ncol, nlay]
        path: Condensate path [ncol, nlay]
        props_type: OpticalProps2str or OpticalProps1scl
        clip_size_to_lower_bound: Raise sizes below the table to its lower bound

    Returns:
        Optical properties of the phase [ncol, nlay, nbnd]
    """
    if props_type not in (OpticalProps1scl, OpticalProps2str):
        raise TypeError(f"Unsupported optical properties type: {props_type}")

    mask = jnp.asarray(mask, dtype=bool)
    size = jnp.asarray(size, dtype=table.ext.dtype)
    path = jnp.asarray(path, dtype=table.ext.dtype)
    if clip_size_to_lower_bound:
        size = jnp.maximum(size, table.lower_bound)

    interpolate = partial(
        compute_from_table, mask, size, table.nsteps, table.step_size, table.lower_bound)

    tau = interpolate(table.ext) * path[..., jnp.newaxis]
    if props_type is OpticalProps1scl:
        return OpticalProps1scl(tau=tau)
    return OpticalProps2str(tau=tau, ssa=interpolate(table.ssa), g=interpolate(table.asy))


def compute_cloud_mask(path: jnp.ndarray, threshold: float = 0.0) -> jnp.ndarray:
    """Cells whose condensate path exceeds `threshold`."""
    return jnp.asarray(path) > threshold


class CloudOptics(SpectralBandSet):
    """
    Lookup-table cloud optics for liquid droplets and ice crystals.

    The lookup tables are built once at construction and never modified. The
    ice tables are reduced to the intermediately rough crystal category.
    """

    def __init__(
        self,
        band_lims_wvn,
        radliq_lwr: float,
        radliq_upr: float,
        radliq_fac: Optional[float],
        radice_lwr: float,
        radice_upr: float,
        radice_fac: Optional[float],
        lut_extliq,
        lut_ssaliq,
        lut_asyliq,
        lut_extice,
        lut_ssaice,
        lut_asyice,
        params: Optional[CloudOpticsParameters] = None,
        dtype: Any = None,
    ):
        """
        Args:
            band_lims_wvn: Band limits in wavenumber [cm⁻¹], shape (nbnd, 2)
            radliq_lwr, radliq_upr: Liquid effective radius of the first and
                last table rows
            radliq_fac: Liquid size factor of the tables (stored, unused)
            radice_lwr, radice_upr: Ice effective size of the first and last
                table rows
            radice_fac: Ice size factor of the tables (stored, unused)
            lut_extliq, lut_ssaliq, lut_asyliq: Liquid tables [nsize_liq, nbnd]
            lut_extice, lut_ssaice, lut_asyice: Ice tables
                [nsize_ice, nbnd, nrghice]
            params: Configuration; defaults to CloudOpticsParameters.default()
            dtype: Floating point type of tables and results. Defaults to the
                canonical JAX float (float64 only with jax_enable_x64).
        """
        super().__init__(band_lims_wvn)
        self._params = params if params is not None else CloudOpticsParameters.default()
        self._dtype = jax.dtypes.canonicalize_dtype(jnp.float64 if dtype is None else dtype)
        self._lookup = lookup_cloud_optics.create_lookup(
            self.nband(),
            radliq_lwr, radliq_upr, radliq_fac,
            radice_lwr, radice_upr, radice_fac,
            lut_extliq, lut_ssaliq, lut_asyliq,
            lut_extice, lut_ssaice, lut_asyice,
            dtype=self._dtype,
        )

    @classmethod
    def from_tables(
        cls,
        band_lims_wvn,
        tables: Mapping[str, Any],
        params: Optional[CloudOpticsParameters] = None,
        dtype: Any = None,
    ) -> 'CloudOptics':
        """Create the engine from tables keyed by the RRTMGP variable names."""
        return cls(band_lims_wvn, params=params, dtype=dtype,
                   **lookup_cloud_optics.load_data(tables))

    @property
    def lookup(self) -> LookupCloudOptics:
        return self._lookup

    @property
    def ice_roughness(self) -> IceRoughness:
        return self._lookup.ice_roughness

    @property
    def params(self) -> CloudOpticsParameters:
        return self._params

    @property
    def dtype(self):
        return self._dtype

    def cloud_mask(self, path: jnp.ndarray) -> jnp.ndarray:
        """Cloud mask from a condensate path using the configured threshold."""
        return compute_cloud_mask(path, self._params.mask_threshold)

    def compute_two_stream(
        self,
        liqmsk: jnp.ndarray,
        icemsk: jnp.ndarray,
        clwp: jnp.ndarray,
        ciwp: jnp.ndarray,
        reliq: jnp.ndarray,
        reice: jnp.ndarray,
    ) -> OpticalProps2str:
        """
        Two-stream cloud optical properties.

        Args:
            liqmsk: Cells containing liquid cloud [ncol, nlay]
            icemsk: Cells containing ice cloud [ncol, nlay]
            clwp: Cloud liquid water path [ncol, nlay]
            ciwp: Cloud ice water path [ncol, nlay]
            reliq: Liquid effective radius [ncol, nlay]
            reice: Ice effective size [ncol, nlay]

        Returns:
            Combined liquid and ice optical properties [ncol, nlay, nbnd]
        """
        return self._compute(OpticalProps2str, liqmsk, icemsk, clwp, ciwp, reliq, reice)

    def compute_absorption_only(
        self,
        liqmsk: jnp.ndarray,
        icemsk: jnp.ndarray,
        clwp: jnp.ndarray,
        ciwp: jnp.ndarray,
        reliq: jnp.ndarray,
        reice: jnp.ndarray,
    ) -> OpticalProps1scl:
        """
        Absorption-only cloud optical depth.

        Single-scattering albedo and asymmetry tables are not used, so the
        result must not be mixed with two-stream properties.

        Args:
            liqmsk: Cells containing liquid cloud [ncol, nlay]
            icemsk: Cells containing ice cloud [ncol, nlay]
            clwp: Cloud liquid water path [ncol, nlay]
            ciwp: Cloud ice water path [ncol, nlay]
            reliq: Liquid effective radius [ncol, nlay]
            reice: Ice effective size [ncol, nlay]

        Returns:
            Combined liquid and ice optical depth [ncol, nlay, nbnd]
        """
        return self._compute(OpticalProps1scl, liqmsk, icemsk, clwp, ciwp, reliq, reice)

    def _compute(self, props_type, liqmsk, icemsk, clwp, ciwp, reliq, reice) -> OpticalProps:
        liqmsk, icemsk, clwp, ciwp, reliq, reice = self._prepare_fields(
            liqmsk=liqmsk, icemsk=icemsk, clwp=clwp, ciwp=ciwp, reliq=reliq, reice=reice)
        ncol, nlay = clwp.shape
        logger.debug(
            "Computing %s cloud optics for %d columns, %d layers, %d bands",
            props_type.__name__, ncol, nlay, self.nband())

        clip = self._params.clip_size_to_lower_bound
        liquid = compute_phase_optics(
            self._lookup.liquid, liqmsk, reliq, clwp, props_type, clip)
        ice = compute_phase_optics(
            self._lookup.ice, icemsk, reice, ciwp, props_type, clip)
        return liquid.combine(ice)

    def _prepare_fields(self, **fields) -> Tuple[jnp.ndarray, ...]:
        """Cast the input fields and check that they share (ncol, nlay)."""
        arrays = {}
        for name, value in fields.items():
            if name.endswith('msk'):
                arrays[name] = jnp.asarray(value, dtype=bool)
            else:
                arrays[name] = jnp.asarray(value, dtype=self._dtype)
            if arrays[name].ndim != 2:
                raise ValueError(
                    f"{name} must have shape (ncol, nlay), got {arrays[name].shape}")

        shapes = {name: array.shape for name, array in arrays.items()}
        if len(set(shapes.values())) != 1:
            raise ValueError(f"Cloud fields have inconsistent shapes: {shapes}")
        return tuple(arrays.values())
