"""Van der Merwe scaled sigma points.

Generates the ``2n + 1`` deterministic sample points that capture the
mean and covariance of an ``n``-dimensional Gaussian, along with the
weights used to reassemble a mean and covariance from them.

With ``lambda = alpha^2 (n + kappa) - n`` the points are ``x`` followed by
``x + L[:, i]`` and ``x - L[:, i]`` for each column of the Cholesky factor
``L`` of ``(n + lambda) P``. The weights are

- ``Wm[0] = lambda / (n + lambda)``
- ``Wc[0] = lambda / (n + lambda) + 1 - alpha^2 + beta``
- ``Wm[i] = Wc[i] = 1 / (2 (n + lambda))`` for ``i >= 1``.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_dtype
from ukfjax.estimation._types import SigmaWeights, UKFConfig

_DEFAULT_UKF_CONFIG = UKFConfig()


def num_sigmas(n: int) -> int:
    """Return the number of sigma points for an ``n``-dimensional state.

    Args:
        n: State dimension.

    Returns:
        int: ``2n + 1``.
    """
    return 2 * n + 1


def _lambda(n: int, config: UKFConfig) -> float:
    return config.alpha**2 * (n + config.kappa) - n


def sigma_weights(n: int, config: UKFConfig = _DEFAULT_UKF_CONFIG) -> SigmaWeights:
    """Compute the mean and covariance weights for ``n`` states.

    Args:
        n: State dimension.
        config: Sigma point configuration. Default: ``UKFConfig()``.

    Returns:
        SigmaWeights: ``(Wm, Wc)``, each of shape ``(2n+1,)``.

    Examples:
        ```python
        from ukfjax.estimation import sigma_weights

        Wm, Wc = sigma_weights(2)
        # Wm = [0.0, 0.25, 0.25, 0.25, 0.25], Wc = [2.0, 0.25, ...]
        ```
    """
    dtype = get_dtype()
    lam = _lambda(n, config)

    w0_m = lam / (n + lam)
    w0_c = w0_m + (1.0 - config.alpha**2 + config.beta)
    wi = 1.0 / (2.0 * (n + lam))

    Wm = jnp.concatenate([jnp.array([w0_m], dtype=dtype), jnp.full(2 * n, wi, dtype=dtype)])
    Wc = jnp.concatenate([jnp.array([w0_c], dtype=dtype), jnp.full(2 * n, wi, dtype=dtype)])

    return SigmaWeights(Wm=Wm, Wc=Wc)


def _eigh_sqrt(P: Array) -> Array:
    """Square root ``S`` with ``S S^T = P`` for a singular covariance.

    Eigenvalues within rounding of zero are clipped to zero; a genuinely
    negative eigenvalue is left to produce NaN.
    """
    w, V = jnp.linalg.eigh(0.5 * (P + P.T))
    tol = jnp.finfo(P.dtype).eps * 100.0 * jnp.max(jnp.abs(w))
    w = jnp.where((w < 0.0) & (w >= -tol), 0.0, w)
    return V * jnp.sqrt(w)[None, :]


def sigma_points(
    x: ArrayLike,
    P: ArrayLike,
    config: UKFConfig = _DEFAULT_UKF_CONFIG,
) -> Array:
    """Generate scaled sigma points from a mean and covariance.

    The points spread along the columns of the Cholesky factor of
    ``(n + lambda) P``. ``P`` is factored as given, so the unscented
    transform of the points reproduces ``P`` exactly. When the Cholesky
    factorization fails on a singular ``P`` (e.g. the zero covariance
    right after a reset) the points spread along a symmetric
    eigendecomposition square root instead, which collapses them onto
    ``x`` in the zero-variance directions. An indefinite ``P`` still
    produces NaN points.

    Args:
        x: State mean of shape ``(n,)``.
        P: State covariance of shape ``(n, n)``.
        config: Sigma point configuration. Default: ``UKFConfig()``.

    Returns:
        jax.Array: Sigma points of shape ``(2n+1, n)``, one per row.
    """
    dtype = get_dtype()
    x = jnp.asarray(x, dtype=dtype)
    P = jnp.asarray(P, dtype=dtype)

    n = x.shape[0]
    scaled_P = (n + _lambda(n, config)) * P

    L = jnp.linalg.cholesky(scaled_P)
    L = jax.lax.cond(
        jnp.all(jnp.isfinite(L)),
        lambda: L,
        lambda: _eigh_sqrt(scaled_P),
    )

    # Rows of L.T are the columns of L
    points_plus = x[None, :] + L.T
    points_minus = x[None, :] - L.T
    return jnp.concatenate([x[None, :], points_plus, points_minus], axis=0)
