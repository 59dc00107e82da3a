"""Numeric precision and debug-check settings for the filter.

Every ukfjax function casts its inputs to the dtype returned by
``get_dtype`` on entry, so the filter state, the cached sigma points and
the discretized noise all share one precision. The default is
``jnp.float32``, the native width on accelerators. Filters with tight
covariances or large state magnitudes usually want ``jnp.float64``;
selecting it also turns on JAX's ``jax_enable_x64``.

The dtype is read while a function is traced. An
:class:`~ukfjax.estimation.UnscentedKalmanFilter` compiles predict and
correct on first use, so a filter stepped before ``set_dtype`` can keep
running its cached programs at the old precision. Change the dtype
first, then build filters.

``set_debug_checks`` turns on covariance health logging in the stateful
filter. The checks run in eager Python after each step and only ever
log; the numerical results are never altered.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_dtype = jnp.float32

_debug_checks = False


def set_dtype(dtype) -> None:
    """Select the float dtype for filter state and computations.

    Affects functions traced after the call. Call it before building
    filters.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``. ``jnp.float64`` also enables
            ``jax_enable_x64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the float dtype selected with ``set_dtype``.

    Returns:
        The active float dtype (default ``jnp.float32``).
    """
    return _dtype


def get_symmetry_tolerance() -> float:
    """Return the dtype-adaptive tolerance for covariance symmetry checks.

    The tolerance scales with the precision of the configured float dtype:

    - ``float16``:  1e-2
    - ``bfloat16``: 1e-2
    - ``float32``:  1e-4
    - ``float64``:  1e-9

    Returns:
        float: Absolute tolerance on ``|P - P^T|``.
    """
    if _dtype == jnp.float64:
        return 1e-9
    if _dtype == jnp.float32:
        return 1e-4
    # float16 and bfloat16
    return 1e-2


def set_debug_checks(enabled: bool) -> None:
    """Enable or disable covariance health logging in the stateful filter.

    Args:
        enabled: If ``True``, ``UnscentedKalmanFilter.predict`` and
            ``UnscentedKalmanFilter.correct`` log warnings for asymmetric,
            non-finite, indefinite, or ill-conditioned matrices.
    """
    global _debug_checks
    _debug_checks = bool(enabled)


def get_debug_checks() -> bool:
    """Return whether covariance health logging is enabled.

    Returns:
        bool: Current setting (default ``False``).
    """
    return _debug_checks
