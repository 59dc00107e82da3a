"""Finite-difference Jacobians of system models.

Linearizes ``f(x, u)`` about an operating point with central differences.
Each column perturbs one input component by ``+/- h``; the columns are
evaluated in parallel via ``jax.vmap``, so the model must be built from
JAX operations.

By default the step follows the configured dtype and the size of the
operating point, ``h_i = cbrt(eps) * max(1, |x_i|)``, so large state
components stay resolvable in float32.

No derivative rules are needed: models with saturations or ``jnp.where``
branches linearize to the secant slope around the operating point.
"""

from __future__ import annotations

from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_dtype


def _step_sizes(x: Array, epsilon: float | None) -> Array:
    if epsilon is not None:
        return jnp.full(x.shape, epsilon, dtype=x.dtype)
    scale = jnp.cbrt(jnp.finfo(x.dtype).eps)
    return scale * jnp.maximum(1.0, jnp.abs(x))


def numerical_jacobian(
    f: Callable[[Array], Array],
    x: ArrayLike,
    epsilon: float | None = None,
) -> Array:
    """Compute the Jacobian of ``f`` at ``x`` by central differences.

    Args:
        f: Vector-valued function ``f(x) -> y`` with ``x`` of shape ``(n,)``
            and ``y`` of shape ``(m,)``.
        x: Point at which to linearize, shape ``(n,)``.
        epsilon: Fixed perturbation applied to every component of ``x``.
            Default: ``None``, a step scaled to the dtype and to ``|x_i|``.

    Returns:
        jax.Array: Jacobian ``df/dx`` of shape ``(m, n)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ukfjax.jacobian import numerical_jacobian

        J = numerical_jacobian(lambda x: jnp.array([x[0] * x[1]]), jnp.array([2.0, 3.0]))
        # J ~ [[3.0, 2.0]]
        ```
    """
    dtype = get_dtype()
    x = jnp.asarray(x, dtype=dtype)

    steps = jnp.diag(_step_sizes(x, epsilon))

    def column(dx):
        x_plus = x + dx
        x_minus = x - dx
        # Divide by the step actually taken after rounding
        return (f(x_plus) - f(x_minus)) / jnp.sum(x_plus - x_minus)

    # vmap stacks columns as rows: (n, m)
    return jax.vmap(column)(steps).T


def numerical_jacobian_x(
    f: Callable[[Array, Array], Array],
    x: ArrayLike,
    u: ArrayLike,
    epsilon: float | None = None,
) -> Array:
    """Jacobian of ``f(x, u)`` with respect to the state ``x``.

    Args:
        f: System model ``f(x, u)``.
        x: State operating point, shape ``(n,)``.
        u: Input operating point, shape ``(p,)``.
        epsilon: Fixed perturbation size. Default: scaled step.

    Returns:
        jax.Array: ``df/dx`` of shape ``(m, n)``.
    """
    u = jnp.asarray(u, dtype=get_dtype())
    return numerical_jacobian(lambda xi: f(xi, u), x, epsilon)


def numerical_jacobian_u(
    f: Callable[[Array, Array], Array],
    x: ArrayLike,
    u: ArrayLike,
    epsilon: float | None = None,
) -> Array:
    """Jacobian of ``f(x, u)`` with respect to the input ``u``.

    Args:
        f: System model ``f(x, u)``.
        x: State operating point, shape ``(n,)``.
        u: Input operating point, shape ``(p,)``.
        epsilon: Fixed perturbation size. Default: scaled step.

    Returns:
        jax.Array: ``df/du`` of shape ``(m, p)``.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    return numerical_jacobian(lambda ui: f(x, ui), u, epsilon)
