"""
LUT-based cloud optics

Band-resolved optical depth, single-scattering albedo and asymmetry factor
of liquid and ice clouds, interpolated from the RRTMGP cloud lookup tables.
"""

from .spectral_bands import SpectralBandSet
from .optical_props import OpticalProps1scl, OpticalProps2str
from .parameters import CloudOpticsParameters
from .lookup_cloud_optics import (
    IceRoughness,
    LookupCloudOptics,
    ParticleSizeTable,
    build_particle_size_table,
    create_lookup,
    select_ice_roughness,
)
from .cloud_optics import (
    CloudOptics,
    compute_cloud_mask,
    compute_from_table,
    compute_phase_optics,
    table_index_and_fraction,
)

__all__ = [
    # Engine
    "CloudOptics",
    "CloudOpticsParameters",

    # Kernels
    "compute_from_table",
    "compute_phase_optics",
    "compute_cloud_mask",
    "table_index_and_fraction",

    # Lookup tables
    "IceRoughness",
    "LookupCloudOptics",
    "ParticleSizeTable",
    "build_particle_size_table",
    "create_lookup",
    "select_ice_roughness",

    # Containers
    "SpectralBandSet",
    "OpticalProps1scl",
    "OpticalProps2str",
]
