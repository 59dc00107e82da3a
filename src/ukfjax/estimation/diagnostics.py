"""Covariance health checks.

The filter never raises on numerical trouble: a singular innovation
covariance or an indefinite ``P`` shows up only as NaN, Inf, or a
diverging estimate. These helpers let the caller (or the stateful filter
in debug mode) inspect a matrix and decide whether to re-seed.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_dtype, get_symmetry_tolerance

logger = logging.getLogger(__name__)

_DEFAULT_MAX_CONDITION = 1e12


class CovarianceHealth(NamedTuple):
    """Summary of a covariance matrix's numerical health.

    Attributes:
        symmetric: ``True`` if ``|P - P^T|`` is within the dtype-adaptive
            symmetry tolerance everywhere.
        finite: ``True`` if every entry is finite.
        min_eigenvalue: Smallest eigenvalue of the symmetric part of ``P``.
            Negative values mean ``P`` is not positive semi-definite.
        condition_number: 2-norm condition number of ``P``. ``inf`` for a
            singular matrix.
    """

    symmetric: Array
    finite: Array
    min_eigenvalue: Array
    condition_number: Array


def covariance_health(P: ArrayLike) -> CovarianceHealth:
    """Compute health indicators for a covariance matrix.

    Traceable; can be used inside ``jax.jit``.

    Args:
        P: Covariance matrix of shape ``(n, n)``.

    Returns:
        CovarianceHealth: Symmetry, finiteness, minimum eigenvalue and
            condition number of ``P``.
    """
    dtype = get_dtype()
    P = jnp.asarray(P, dtype=dtype)

    finite = jnp.all(jnp.isfinite(P))
    symmetric = jnp.all(jnp.abs(P - P.T) <= get_symmetry_tolerance())

    # eigvalsh and cond do not tolerate NaN
    P_safe = jnp.where(finite, P, jnp.zeros_like(P))
    min_eig = jnp.min(jnp.linalg.eigvalsh(0.5 * (P_safe + P_safe.T)))
    cond = jnp.linalg.cond(P_safe)

    return CovarianceHealth(
        symmetric=symmetric,
        finite=finite,
        min_eigenvalue=jnp.where(finite, min_eig, jnp.nan),
        condition_number=jnp.where(finite, cond, jnp.inf),
    )


def log_covariance_health(
    P: ArrayLike,
    name: str,
    max_condition: float = _DEFAULT_MAX_CONDITION,
) -> CovarianceHealth:
    """Check a covariance matrix and log a warning for each problem found.

    Eager only; pulls the indicators back to Python to decide what to log.

    Args:
        P: Covariance matrix of shape ``(n, n)``.
        name: Label used in log messages (e.g. ``"P"`` or ``"Py"``).
        max_condition: Condition number above which the matrix is reported
            as ill-conditioned. Default: ``1e12``.

    Returns:
        CovarianceHealth: The computed indicators.
    """
    health = covariance_health(P)

    if not bool(health.finite):
        logger.warning("%s contains non-finite entries", name)
        return health

    if not bool(health.symmetric):
        logger.warning(
            "%s is not symmetric (max asymmetry %g)",
            name,
            float(jnp.max(jnp.abs(jnp.asarray(P) - jnp.asarray(P).T))),
        )
    if float(health.min_eigenvalue) < -get_symmetry_tolerance():
        logger.warning(
            "%s is not positive semi-definite (min eigenvalue %g)",
            name,
            float(health.min_eigenvalue),
        )
    if float(health.condition_number) > max_condition:
        logger.warning(
            "%s is ill-conditioned (condition number %g)",
            name,
            float(health.condition_number),
        )

    return health
