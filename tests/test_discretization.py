"""Tests for the ukfjax.discretization module."""

import jax
import jax.numpy as jnp
import pytest

from ukfjax.discretization import (
    discretize_a,
    discretize_ab,
    discretize_aq,
    discretize_aq_taylor,
    discretize_r,
)

# Double integrator: state [position, velocity]
_A_DI = jnp.array([[0.0, 1.0], [0.0, 0.0]])
_B_DI = jnp.array([[0.0], [1.0]])


class TestDiscretizeA:
    def test_zero_matrix(self):
        """expm(0) is the identity."""
        assert jnp.allclose(discretize_a(jnp.zeros((3, 3)), 0.1), jnp.eye(3))

    def test_double_integrator(self):
        """Nilpotent A gives the exact kinematic transition."""
        Ad = discretize_a(_A_DI, 0.5)
        assert jnp.allclose(Ad, jnp.array([[1.0, 0.5], [0.0, 1.0]]), atol=1e-12)

    def test_scalar_decay(self):
        """Scalar A gives exp(a dt)."""
        Ad = discretize_a(jnp.array([[-2.0]]), 0.3)
        assert float(Ad[0, 0]) == pytest.approx(float(jnp.exp(-0.6)), abs=1e-12)


class TestDiscretizeAB:
    def test_double_integrator(self):
        """Zero-order-hold input matrix of a double integrator."""
        dt = 0.1
        Ad, Bd = discretize_ab(_A_DI, _B_DI, dt)
        assert jnp.allclose(Ad, jnp.array([[1.0, dt], [0.0, 1.0]]), atol=1e-12)
        assert jnp.allclose(Bd, jnp.array([[0.5 * dt**2], [dt]]), atol=1e-12)

    def test_scalar_lag(self):
        """Bd = (1 - exp(-dt)) for dx/dt = -x + u."""
        dt = 0.2
        _, Bd = discretize_ab(jnp.array([[-1.0]]), jnp.array([[1.0]]), dt)
        assert float(Bd[0, 0]) == pytest.approx(1.0 - float(jnp.exp(-dt)), abs=1e-12)


class TestDiscretizeAQ:
    def test_zero_dynamics(self):
        """With A = 0 the noise simply accumulates: Qd = Q dt."""
        Q = jnp.diag(jnp.array([0.5, 2.0]))
        Ad, Qd = discretize_aq(jnp.zeros((2, 2)), Q, 0.1)
        assert jnp.allclose(Ad, jnp.eye(2), atol=1e-12)
        assert jnp.allclose(Qd, 0.1 * Q, atol=1e-12)

    def test_double_integrator_white_acceleration(self):
        """Continuous white-noise acceleration model."""
        dt = 0.1
        Q = jnp.diag(jnp.array([0.0, 1.0]))
        _, Qd = discretize_aq(_A_DI, Q, dt)
        expected = jnp.array([[dt**3 / 3.0, dt**2 / 2.0], [dt**2 / 2.0, dt]])
        assert jnp.allclose(Qd, expected, atol=1e-12)

    def test_symmetric(self):
        """Qd is symmetric even for a non-normal A."""
        A = jnp.array([[-1.0, 3.0], [0.2, -0.5]])
        Q = jnp.array([[1.0, 0.1], [0.1, 0.3]])
        _, Qd = discretize_aq(A, Q, 0.05)
        assert jnp.allclose(Qd, Qd.T, atol=1e-15)


class TestDiscretizeAQTaylor:
    def test_zero_dynamics(self):
        """With A = 0 the series reduces to Q dt."""
        Q = jnp.diag(jnp.array([0.5, 2.0]))
        Ad, Qd = discretize_aq_taylor(jnp.zeros((2, 2)), Q, 0.1)
        assert jnp.allclose(Ad, jnp.eye(2), atol=1e-12)
        assert jnp.allclose(Qd, 0.1 * Q, atol=1e-12)

    def test_double_integrator_exact(self):
        """The series terminates for a nilpotent A, so it is exact."""
        dt = 0.1
        Q = jnp.diag(jnp.array([0.0, 1.0]))
        _, Qd = discretize_aq_taylor(_A_DI, Q, dt)
        expected = jnp.array([[dt**3 / 3.0, dt**2 / 2.0], [dt**2 / 2.0, dt]])
        assert jnp.allclose(Qd, expected, atol=1e-12)

    def test_matches_matrix_exponential(self):
        """Taylor and expm forms agree for small |A| dt."""
        A = jnp.array([[0.0, 1.0], [-9.81, -0.5]])
        Q = jnp.diag(jnp.array([0.01, 0.1]))
        dt = 0.001
        Ad_t, Qd_t = discretize_aq_taylor(A, Q, dt)
        Ad_e, Qd_e = discretize_aq(A, Q, dt)
        assert jnp.allclose(Ad_t, Ad_e, atol=1e-12)
        assert jnp.allclose(Qd_t, Qd_e, rtol=1e-6, atol=1e-14)

    def test_symmetrizes_q(self):
        """An asymmetric Q is treated as its symmetric part."""
        A = jnp.array([[-0.2, 0.1], [0.0, -0.3]])
        Q = jnp.array([[1.0, 0.4], [0.0, 1.0]])
        Q_sym = 0.5 * (Q + Q.T)
        _, Qd = discretize_aq_taylor(A, Q, 0.05)
        _, Qd_sym = discretize_aq_taylor(A, Q_sym, 0.05)
        assert jnp.allclose(Qd, Qd_sym, atol=1e-15)
        assert jnp.allclose(Qd, Qd.T, atol=1e-15)

    def test_jit_with_traced_dt(self):
        """dt may be a traced value."""

        @jax.jit
        def disc(dt):
            return discretize_aq_taylor(_A_DI, jnp.eye(2), dt)[1]

        assert jnp.allclose(disc(0.1), discretize_aq_taylor(_A_DI, jnp.eye(2), 0.1)[1])


class TestDiscretizeR:
    def test_divides_by_dt(self):
        """Discrete measurement noise is R / dt."""
        R = jnp.diag(jnp.array([1.0, 4.0]))
        assert jnp.allclose(discretize_r(R, 0.02), R / 0.02)

    def test_unit_dt_identity(self):
        """A unit timestep leaves R unchanged."""
        R = jnp.array([[2.0]])
        assert jnp.allclose(discretize_r(R, 1.0), R)
