"""
Unit tests for the optical property containers

Date: 2026-10-19
"""

import jax
import jax.numpy as jnp
import pytest

from jcloud.optics.optical_props import OpticalProps1scl, OpticalProps2str


def _two_stream(tau, ssa, g, shape=(2, 3, 4)):
    return OpticalProps2str(
        tau=jnp.full(shape, tau),
        ssa=jnp.full(shape, ssa),
        g=jnp.full(shape, g),
    )


def test_zeros():
    """Test zero-initialized containers"""
    props_1scl = OpticalProps1scl.zeros(2, 3, 4)
    props_2str = OpticalProps2str.zeros(2, 3, 4, dtype=jnp.float32)

    assert props_1scl.shape == (2, 3, 4)
    assert props_2str.shape == (2, 3, 4)
    assert props_2str.g.dtype == jnp.float32
    assert jnp.all(props_2str.ssa == 0.0)


def test_combine_absorption_only():
    """Test that absorption-only combination sums optical depth"""
    props_1 = OpticalProps1scl(tau=jnp.full((1, 2, 3), 1.5))
    props_2 = OpticalProps1scl(tau=jnp.full((1, 2, 3), 0.25))

    combined = props_1.combine(props_2)

    assert jnp.allclose(combined.tau, 1.75)
    # Operands are left untouched
    assert jnp.allclose(props_1.tau, 1.5)
    assert jnp.allclose(props_2.tau, 0.25)


def test_combine_two_stream():
    """Test the two-stream mixing rules"""
    props_1 = _two_stream(2.0, 1.0, 0.8)
    props_2 = _two_stream(2.0, 0.5, 0.2)

    combined = props_1.combine(props_2)

    # tau_ssa = 2 + 1 = 3
    assert jnp.allclose(combined.tau, 4.0)
    assert jnp.allclose(combined.ssa, 0.75)
    assert jnp.allclose(combined.g, (2.0 * 0.8 + 1.0 * 0.2) / 3.0)


def test_combine_two_stream_empty_cells():
    """Test that combining zero optical depths gives finite zeros"""
    combined = OpticalProps2str.zeros(1, 1, 2).combine(OpticalProps2str.zeros(1, 1, 2))

    assert jnp.all(jnp.isfinite(combined.ssa))
    assert jnp.all(jnp.isfinite(combined.g))
    assert jnp.all(combined.tau == 0.0)


def test_combine_rejects_mixed_representations():
    """Test that absorption-only and two-stream cannot be combined"""
    props_1scl = OpticalProps1scl.zeros(2, 3, 4)
    props_2str = OpticalProps2str.zeros(2, 3, 4)

    with pytest.raises(TypeError):
        props_2str.combine(props_1scl)
    with pytest.raises(TypeError):
        props_1scl.combine(props_2str)


def test_combine_rejects_shape_mismatch():
    """Test that containers of different shapes cannot be combined"""
    with pytest.raises(ValueError, match="different shapes"):
        OpticalProps1scl.zeros(2, 3, 4).combine(OpticalProps1scl.zeros(2, 3, 5))


def test_delta_scale():
    """Test delta-scaling with the default forward fraction g²"""
    props = _two_stream(2.0, 0.5, 0.5)

    scaled = props.delta_scale()

    f = 0.25
    assert jnp.allclose(scaled.tau, (1.0 - 0.5 * f) * 2.0)
    assert jnp.allclose(scaled.ssa, 0.5 * (1.0 - f) / (1.0 - 0.5 * f))
    assert jnp.allclose(scaled.g, (0.5 - f) / (1.0 - f))


def test_delta_scale_rejects_bad_forward_fraction():
    """Test forward fraction validation"""
    props = _two_stream(1.0, 0.5, 0.5)

    with pytest.raises(ValueError, match="between 0 and 1"):
        props.delta_scale(jnp.full(props.shape, 1.5))
    with pytest.raises(ValueError, match="does not match"):
        props.delta_scale(jnp.zeros((1, 1, 1)))


def test_get_subset():
    """Test column subsets"""
    tau = jnp.arange(24.0).reshape(2, 3, 4)
    props = OpticalProps2str(tau=tau, ssa=tau / 24.0, g=tau / 48.0)

    subset = props.get_subset(1, 2)

    assert subset.shape == (1, 3, 4)
    assert jnp.array_equal(subset.tau, tau[1:2])
    assert jnp.array_equal(OpticalProps1scl(tau=tau).get_subset(0, 1).tau, tau[:1])


def test_validate():
    """Test physical range checks"""
    _two_stream(1.0, 0.5, -0.3).validate()
    OpticalProps1scl(tau=jnp.ones((1, 1, 1))).validate()

    with pytest.raises(ValueError, match="Optical depth"):
        OpticalProps1scl(tau=-jnp.ones((1, 1, 1))).validate()
    with pytest.raises(ValueError, match="albedo"):
        _two_stream(1.0, 1.5, 0.3).validate()
    with pytest.raises(ValueError, match="Asymmetry"):
        _two_stream(1.0, 0.5, -1.3).validate()


def test_containers_are_pytrees():
    """Test that containers pass through jit"""
    props = _two_stream(2.0, 0.5, 0.5)

    doubled = jax.jit(lambda p: OpticalProps2str(tau=2.0 * p.tau, ssa=p.ssa, g=p.g))(props)

    assert isinstance(doubled, OpticalProps2str)
    assert jnp.allclose(doubled.tau, 4.0)
