"""
Containers for band-resolved optical properties

Two representations are supported:
- `OpticalProps1scl`: absorption-only, optical depth alone
- `OpticalProps2str`: two-stream, optical depth, single-scattering albedo and
  asymmetry factor

All arrays have shape (ncol, nlay, nbnd). The containers are immutable
pytrees; `combine` and `delta_scale` return new containers and leave their
operands untouched. Combining two different representations is an error.
"""

from typing import Optional, Tuple

import jax
import jax.numpy as jnp
import tree_math


def _eps(x: jnp.ndarray) -> jnp.ndarray:
    """Machine epsilon for the dtype of `x`."""
    return jnp.finfo(x.dtype).eps


def _check_same_shape(props_1, props_2):
    if props_1.shape != props_2.shape:
        raise ValueError(
            f"Optical properties have different shapes: {props_1.shape} and {props_2.shape}")


def _check_same_type(props_1, props_2):
    if type(props_1) is not type(props_2):
        raise TypeError(
            f"Cannot combine {type(props_1).__name__} with {type(props_2).__name__}")


@tree_math.struct
class OpticalProps1scl:
    """Absorption-only optical properties"""

    tau: jnp.ndarray     # Optical depth [ncol, nlay, nbnd]

    @classmethod
    def zeros(cls, ncol: int, nlay: int, nbnd: int, dtype=None) -> 'OpticalProps1scl':
        return cls(tau=jnp.zeros((ncol, nlay, nbnd), dtype=dtype))

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.tau.shape

    def combine(self, other: 'OpticalProps1scl') -> 'OpticalProps1scl':
        """Add the optical depth of `other` to this one."""
        _check_same_type(self, other)
        _check_same_shape(self, other)
        return OpticalProps1scl(tau=self.tau + other.tau)

    def get_subset(self, col_start: int, col_end: int) -> 'OpticalProps1scl':
        """Columns [col_start, col_end) of the container."""
        return OpticalProps1scl(tau=self.tau[col_start:col_end])

    def validate(self):
        """Raise `ValueError` if the optical depth is negative anywhere."""
        if bool(jnp.any(self.tau < 0.0)):
            raise ValueError("Optical depth has negative values")


@tree_math.struct
class OpticalProps2str:
    """Two-stream optical properties"""

    tau: jnp.ndarray     # Optical depth [ncol, nlay, nbnd]
    ssa: jnp.ndarray     # Single-scattering albedo [ncol, nlay, nbnd]
    g: jnp.ndarray       # Asymmetry factor [ncol, nlay, nbnd]

    @classmethod
    def zeros(cls, ncol: int, nlay: int, nbnd: int, dtype=None) -> 'OpticalProps2str':
        shape = (ncol, nlay, nbnd)
        return cls(
            tau=jnp.zeros(shape, dtype=dtype),
            ssa=jnp.zeros(shape, dtype=dtype),
            g=jnp.zeros(shape, dtype=dtype),
        )

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.tau.shape

    def combine(self, other: 'OpticalProps2str') -> 'OpticalProps2str':
        """
        Combine with `other` following the two-stream mixing rules.

        Optical depths add; the single-scattering albedo is weighted by optical
        depth and the asymmetry factor by scattering optical depth, so the total
        scattering and absorption cross sections are preserved.

        Args:
            other: Two-stream optical properties of the same shape

        Returns:
            New combined optical properties
        """
        _check_same_type(self, other)
        _check_same_shape(self, other)
        tau, ssa, g = _combine_two_stream(
            self.tau, self.ssa, self.g, other.tau, other.ssa, other.g)
        return OpticalProps2str(tau=tau, ssa=ssa, g=g)

    def delta_scale(self, forward_fraction: Optional[jnp.ndarray] = None) -> 'OpticalProps2str':
        """
        Delta-scale the optical properties.

        Args:
            forward_fraction: Fraction of scattering into the forward peak, same
                shape as the properties. Defaults to g².

        Returns:
            New delta-scaled optical properties
        """
        if forward_fraction is None:
            forward_fraction = self.g * self.g
        elif forward_fraction.shape != self.shape:
            raise ValueError(
                f"Forward fraction shape {forward_fraction.shape} does not match {self.shape}")
        elif bool(jnp.any((forward_fraction < 0.0) | (forward_fraction > 1.0))):
            raise ValueError("Forward scattering fraction must be between 0 and 1")
        tau, ssa, g = _delta_scale(self.tau, self.ssa, self.g, forward_fraction)
        return OpticalProps2str(tau=tau, ssa=ssa, g=g)

    def get_subset(self, col_start: int, col_end: int) -> 'OpticalProps2str':
        """Columns [col_start, col_end) of the container."""
        return OpticalProps2str(
            tau=self.tau[col_start:col_end],
            ssa=self.ssa[col_start:col_end],
            g=self.g[col_start:col_end],
        )

    def validate(self):
        """Raise `ValueError` if any property is outside its physical range."""
        if bool(jnp.any(self.tau < 0.0)):
            raise ValueError("Optical depth has negative values")
        if bool(jnp.any((self.ssa < 0.0) | (self.ssa > 1.0))):
            raise ValueError("Single-scattering albedo is outside [0, 1]")
        if bool(jnp.any(jnp.abs(self.g) > 1.0)):
            raise ValueError("Asymmetry factor is outside [-1, 1]")


@jax.jit
def _combine_two_stream(tau1, ssa1, g1, tau2, ssa2, g2):
    eps = _eps(tau1)
    tau = tau1 + tau2
    tau_ssa_1 = tau1 * ssa1
    tau_ssa_2 = tau2 * ssa2
    tau_ssa = tau_ssa_1 + tau_ssa_2
    g = (tau_ssa_1 * g1 + tau_ssa_2 * g2) / jnp.maximum(tau_ssa, eps)
    ssa = tau_ssa / jnp.maximum(tau, eps)
    return tau, ssa, g


@jax.jit
def _delta_scale(tau, ssa, g, f):
    eps = _eps(tau)
    wf = ssa * f
    tau_scaled = (1.0 - wf) * tau
    ssa_scaled = (ssa - wf) / jnp.maximum(1.0 - wf, eps)
    g_scaled = (g - f) / jnp.maximum(1.0 - f, eps)
    return tau_scaled, ssa_scaled, g_scaled
