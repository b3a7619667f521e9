"""Dataclasses for building and accessing the cloud optics lookup tables."""

import enum
import dataclasses
import logging
from collections.abc import Mapping
from typing import Any, TypeAlias

import jax
import jax.numpy as jnp

from jcloud.optics import constants

Array: TypeAlias = jax.Array

logger = logging.getLogger(__name__)


class IceRoughness(enum.Enum):
	"""Defines the levels of ice roughness that index the ice lookup tables."""
	# No roughness.
	SMOOTH = 0
	# Medium roughness.
	MEDIUM = 1
	# Rough.
	ROUGH = 2


# The intermediately rough category is the only one the engine ever uses.
FIXED_ICE_ROUGHNESS = IceRoughness(constants.ICE_ROUGHNESS_INDEX - 1)


@dataclasses.dataclass(frozen=True)
class ParticleSizeTable:
	"""Optical properties of one condensate phase tabulated by particle size."""
	# Number of particle sizes in the table.
	nsteps: int
	# Spacing of the particle size grid.
	step_size: float
	# Particle size of the first table row.
	lower_bound: float
	# Particle size of the last table row.
	upper_bound: float
	# Extinction coefficient per unit condensate path (`nsteps, nbnd`).
	ext: Array
	# Single-scattering albedo (`nsteps, nbnd`).
	ssa: Array
	# Asymmetry parameter (`nsteps, nbnd`).
	asy: Array

	@property
	def nbnd(self) -> int:
		return self.ext.shape[1]


@dataclasses.dataclass(frozen=True)
class LookupCloudOptics:
	"""Lookup tables of liquid and ice cloud optical properties."""
	# Liquid droplet table, indexed by effective radius.
	liquid: ParticleSizeTable
	# Ice crystal table, indexed by effective size, at the fixed roughness.
	ice: ParticleSizeTable
	# Liquid size factor of the source tables; not used for interpolation.
	radliq_fac: float | None = None
	# Ice size factor of the source tables; not used for interpolation.
	radice_fac: float | None = None
	# Ice roughness the ice table was extracted for.
	ice_roughness: IceRoughness = FIXED_ICE_ROUGHNESS


def select_ice_roughness(lut: Array, roughness: IceRoughness = FIXED_ICE_ROUGHNESS) -> Array:
	"""Extracts one roughness category from a (`nsize, nbnd, nrghice`) table.

	Args:
	lut: The ice lookup table with the roughness category as the last axis.
	roughness: The roughness category to keep.

	Returns:
	A (`nsize, nbnd`) table.
	"""
	if lut.ndim != 3:
		raise ValueError(
			f"Ice lookup tables must have shape (nsize, nbnd, nrghice), got {lut.shape}")
	if lut.shape[2] <= roughness.value:
		raise ValueError(
			f"Ice lookup table has {lut.shape[2]} roughness categories, "
			f"category {roughness.name} is not available")
	return lut[:, :, roughness.value]


def build_particle_size_table(
    lower_bound: float,
    upper_bound: float,
    ext: Array,
    ssa: Array,
    asy: Array,
    nbnd: int,
    name: str,
    dtype: Any = None,
) -> ParticleSizeTable:
	"""Builds a `ParticleSizeTable` and checks it against the band set.

	The number of grid points is taken from the size axis of the tables and the
	grid is uniform between `lower_bound` and `upper_bound`.

	Args:
	lower_bound: Particle size of the first table row.
	upper_bound: Particle size of the last table row.
	ext: Extinction table (`nsize, nbnd`).
	ssa: Single-scattering albedo table (`nsize, nbnd`).
	asy: Asymmetry parameter table (`nsize, nbnd`).
	nbnd: Number of bands of the spectral band set.
	name: Name of the phase, used in error messages.
	dtype: The floating point type of the stored tables.

	Returns:
	A `ParticleSizeTable`.
	"""
	ext = jnp.asarray(ext, dtype=dtype)
	ssa = jnp.asarray(ssa, dtype=dtype)
	asy = jnp.asarray(asy, dtype=dtype)
	if ext.ndim != 2:
		raise ValueError(f"{name} lookup tables must have shape (nsize, nbnd), got {ext.shape}")
	if ssa.shape != ext.shape or asy.shape != ext.shape:
		raise ValueError(
			f"{name} lookup tables disagree in shape: ext {ext.shape}, ssa {ssa.shape}, "
			f"asy {asy.shape}")

	nsteps = ext.shape[0]
	if nsteps < constants.MIN_TABLE_STEPS:
		raise ValueError(
			f"{name} lookup tables need at least {constants.MIN_TABLE_STEPS} particle sizes, "
			f"got {nsteps}")
	if ext.shape[1] != nbnd:
		raise ValueError(
			f"{name} lookup tables have {ext.shape[1]} bands, the band set has {nbnd}")

	step_size = (float(upper_bound) - float(lower_bound)) / (nsteps - 1)
	if not step_size > 0.0:
		raise ValueError(
			f"{name} particle size bounds must increase, got lower {lower_bound} "
			f"and upper {upper_bound}")

	return ParticleSizeTable(
		nsteps=nsteps,
		step_size=step_size,
		lower_bound=float(lower_bound),
		upper_bound=float(upper_bound),
		ext=ext,
		ssa=ssa,
		asy=asy,
	)


def create_lookup(
    nbnd: int,
    radliq_lwr: float,
    radliq_upr: float,
    radliq_fac: float | None,
    radice_lwr: float,
    radice_upr: float,
    radice_fac: float | None,
    lut_extliq: Array,
    lut_ssaliq: Array,
    lut_asyliq: Array,
    lut_extice: Array,
    lut_ssaice: Array,
    lut_asyice: Array,
    dtype: Any = None,
) -> LookupCloudOptics:
	"""Creates a `LookupCloudOptics` from the raw RRTMGP coefficients.

	Liquid tables are (`nsize_liq, nbnd`); ice tables are
	(`nsize_ice, nbnd, nrghice`) and are reduced to the intermediately rough
	category.
	"""
	liquid = build_particle_size_table(
		radliq_lwr, radliq_upr, lut_extliq, lut_ssaliq, lut_asyliq,
		nbnd=nbnd, name='Liquid', dtype=dtype)
	lut_ice = [jnp.asarray(lut) for lut in (lut_extice, lut_ssaice, lut_asyice)]
	ice = build_particle_size_table(
		radice_lwr, radice_upr, *[select_ice_roughness(lut) for lut in lut_ice],
		nbnd=nbnd, name='Ice', dtype=dtype)

	logger.info(
		"Cloud optics tables: %d liquid sizes in [%g, %g], %d ice sizes in [%g, %g], "
		"%d bands, ice roughness %s",
		liquid.nsteps, liquid.lower_bound, liquid.upper_bound,
		ice.nsteps, ice.lower_bound, ice.upper_bound, nbnd, FIXED_ICE_ROUGHNESS.name)
	return LookupCloudOptics(
		liquid=liquid,
		ice=ice,
		radliq_fac=radliq_fac,
		radice_fac=radice_fac,
	)


def load_data(tables: Mapping[str, Any]) -> dict[str, Any]:
	"""Maps the RRTMGP variable names onto `create_lookup` arguments.

	Args:
	tables: The lookup tables and bounds as a dictionary keyed by the RRTMGP
	  variable names.

	Returns:
	A dictionary of keyword arguments for `create_lookup`.
	"""
	required = (
		constants.LIQUID_BOUND_KEYS[:2] + constants.ICE_BOUND_KEYS[:2]
		+ constants.LIQUID_TABLE_KEYS + constants.ICE_TABLE_KEYS)
	missing = [key for key in required if key not in tables]
	if missing:
		raise ValueError(f"Cloud optics tables are missing {missing}")

	data = {key: tables[key] for key in required}
	data['radliq_fac'] = tables.get('radliq_fac')
	data['radice_fac'] = tables.get('radice_fac')
	return data

