"""Continuous-to-discrete conversion of linear system and noise matrices.

For a continuous-time model ``dx/dt = A x + B u + w`` with white process
noise ``w ~ N(0, Q)``, the discrete model over a timestep ``dt`` is
``x[k+1] = Ad x[k] + Bd u[k] + w[k]`` with ``w[k] ~ N(0, Qd)``, where

.. math::

    A_d = e^{A\\,dt}, \\qquad
    Q_d = \\int_0^{dt} e^{A\\tau} Q e^{A^T\\tau} d\\tau

``Qd`` is evaluated with Van Loan's method: the matrix exponential of the
block matrix ``[[-A, Q], [0, A^T]] dt`` has upper-right block ``Phi12`` and
``Qd = Ad @ Phi12``. :func:`discretize_aq` evaluates the exponential
directly; :func:`discretize_aq_taylor` sums the first five terms of the
``Phi12`` series, which is what the unscented Kalman filter uses every
predict step.

Measurement noise is sampled rather than integrated, so its discrete
covariance is the continuous spectral density divided by ``dt``.
"""

from __future__ import annotations

import jax.numpy as jnp
import jax.scipy.linalg
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_dtype

# Number of series terms in the Taylor approximation of Phi12
_TAYLOR_TERMS = 5


def discretize_a(A: ArrayLike, dt: ArrayLike) -> Array:
    """Discretize a continuous system matrix.

    Args:
        A: Continuous system matrix of shape ``(n, n)``.
        dt: Discretization timestep.

    Returns:
        jax.Array: Discrete system matrix ``e^{A dt}`` of shape ``(n, n)``.
    """
    dtype = get_dtype()
    A = jnp.asarray(A, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)
    return jax.scipy.linalg.expm(A * dt)


def discretize_ab(
    A: ArrayLike,
    B: ArrayLike,
    dt: ArrayLike,
) -> tuple[Array, Array]:
    """Discretize a continuous system and input matrix pair.

    Uses the zero-order-hold identity
    ``expm([[A, B], [0, 0]] dt) = [[Ad, Bd], [0, I]]``.

    Args:
        A: Continuous system matrix of shape ``(n, n)``.
        B: Continuous input matrix of shape ``(n, p)``.
        dt: Discretization timestep.

    Returns:
        A tuple ``(Ad, Bd)`` of shapes ``(n, n)`` and ``(n, p)``.
    """
    dtype = get_dtype()
    A = jnp.asarray(A, dtype=dtype)
    B = jnp.asarray(B, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)
    n = A.shape[0]
    p = B.shape[1]

    M = jnp.zeros((n + p, n + p), dtype=dtype)
    M = M.at[:n, :n].set(A)
    M = M.at[:n, n:].set(B)
    phi = jax.scipy.linalg.expm(M * dt)

    return phi[:n, :n], phi[:n, n:]


def discretize_aq(
    A: ArrayLike,
    Q: ArrayLike,
    dt: ArrayLike,
) -> tuple[Array, Array]:
    """Discretize a system matrix and process noise covariance exactly.

    Evaluates Van Loan's block matrix exponential directly. Reference
    implementation for :func:`discretize_aq_taylor`.

    Args:
        A: Continuous system matrix of shape ``(n, n)``.
        Q: Continuous process noise covariance of shape ``(n, n)``.
        dt: Discretization timestep.

    Returns:
        A tuple ``(Ad, Qd)`` of discrete system matrix and symmetric
        discrete process noise covariance, both ``(n, n)``.
    """
    dtype = get_dtype()
    A = jnp.asarray(A, dtype=dtype)
    Q = jnp.asarray(Q, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)
    n = A.shape[0]

    Q = 0.5 * (Q + Q.T)

    M = jnp.zeros((2 * n, 2 * n), dtype=dtype)
    M = M.at[:n, :n].set(-A)
    M = M.at[:n, n:].set(Q)
    M = M.at[n:, n:].set(A.T)
    phi = jax.scipy.linalg.expm(M * dt)

    phi12 = phi[:n, n:]
    phi22 = phi[n:, n:]

    Ad = phi22.T
    Qd = Ad @ phi12

    return Ad, 0.5 * (Qd + Qd.T)


def discretize_aq_taylor(
    A: ArrayLike,
    Q: ArrayLike,
    dt: ArrayLike,
) -> tuple[Array, Array]:
    """Discretize a system matrix and process noise covariance by series.

    The ``k``-th term of the ``Phi12`` series is
    ``T_k dt^k / k!`` with ``T_1 = Q`` and
    ``T_k = -A T_{k-1} + Q (A^T)^{k-1}``. Five terms are summed, which is
    accurate to well below the noise levels of typical control loops
    when ``|A| dt`` is small.

    Args:
        A: Continuous system matrix of shape ``(n, n)``.
        Q: Continuous process noise covariance of shape ``(n, n)``.
        dt: Discretization timestep.

    Returns:
        A tuple ``(Ad, Qd)`` of discrete system matrix and symmetric
        discrete process noise covariance, both ``(n, n)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ukfjax.discretization import discretize_aq_taylor

        A = jnp.array([[0.0, 1.0], [0.0, 0.0]])
        Q = jnp.diag(jnp.array([0.0, 1.0]))
        Ad, Qd = discretize_aq_taylor(A, Q, 0.1)
        # Qd ~ [[dt^3/3, dt^2/2], [dt^2/2, dt]]
        ```
    """
    dtype = get_dtype()
    A = jnp.asarray(A, dtype=dtype)
    Q = jnp.asarray(Q, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)

    Q = 0.5 * (Q + Q.T)

    last_term = Q
    last_coeff = dt

    # (A^T)^k
    Atn = A.T
    phi12 = last_term * last_coeff

    for i in range(2, _TAYLOR_TERMS + 1):
        last_term = -A @ last_term + Q @ Atn
        last_coeff = last_coeff * dt / i
        phi12 = phi12 + last_term * last_coeff
        Atn = Atn @ A.T

    Ad = discretize_a(A, dt)
    Qd = Ad @ phi12

    return Ad, 0.5 * (Qd + Qd.T)


def discretize_r(R: ArrayLike, dt: ArrayLike) -> Array:
    """Discretize a continuous measurement noise covariance.

    Args:
        R: Continuous measurement noise covariance of shape ``(m, m)``.
        dt: Discretization timestep.

    Returns:
        jax.Array: Discrete measurement noise covariance ``R / dt``.
    """
    dtype = get_dtype()
    R = jnp.asarray(R, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)
    return R / dt
