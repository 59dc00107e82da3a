"""Noise covariance constructors.

Builds the continuous-time process and measurement noise covariance
matrices from per-channel standard deviations. These are the ``Q`` and
``R`` matrices consumed by the discretization functions and by the
unscented Kalman filter.
"""

from __future__ import annotations

from collections.abc import Sequence

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_dtype


def make_cov_matrix(std_devs: Sequence[float] | ArrayLike) -> Array:
    """Construct a diagonal covariance matrix from standard deviations.

    Assumes the channels are independent, so every off-diagonal term is
    zero. Negative standard deviations are not rejected; they square to
    the same variance as their magnitude.

    Args:
        std_devs: Standard deviation of each channel, length ``k``.

    Returns:
        jax.Array: Diagonal covariance matrix of shape ``(k, k)`` with
            ``std_devs[i]**2`` on the diagonal.

    Examples:
        ```python
        from ukfjax.noise import make_cov_matrix

        Q = make_cov_matrix([0.1, 0.5])
        # Q = [[0.01, 0.0], [0.0, 0.25]]
        ```
    """
    dtype = get_dtype()
    std_devs = jnp.atleast_1d(jnp.asarray(std_devs, dtype=dtype))
    return jnp.diag(std_devs**2)
