"""Weighted reduction of transformed sigma points.

After each sigma point has been pushed through a (possibly nonlinear)
function, the unscented transform recovers the mean and covariance of
the transformed distribution as weighted sums over the points.
The transform is exact when the function is affine.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_dtype


def unscented_transform(
    sigmas: ArrayLike,
    Wm: ArrayLike,
    Wc: ArrayLike,
) -> tuple[Array, Array]:
    """Compute the weighted mean and covariance of a sigma point set.

    Args:
        sigmas: Transformed sigma points of shape ``(N, m)``, one per row.
        Wm: Mean weights of shape ``(N,)``.
        Wc: Covariance weights of shape ``(N,)``.

    Returns:
        A tuple ``(mean, cov)`` of shapes ``(m,)`` and ``(m, m)``.
    """
    dtype = get_dtype()
    sigmas = jnp.asarray(sigmas, dtype=dtype)
    Wm = jnp.asarray(Wm, dtype=dtype)
    Wc = jnp.asarray(Wc, dtype=dtype)

    mean = jnp.einsum("i,ij->j", Wm, sigmas)

    diff = sigmas - mean[None, :]
    cov = jnp.einsum("i,ij,ik->jk", Wc, diff, diff)

    return mean, cov
