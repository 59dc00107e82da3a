"""Classic 4th-order Runge-Kutta integrator (RK4).

Implements the standard four-stage, 4th-order explicit Runge-Kutta method
for systems of the form ``dx/dt = f(x, u)``. The control input is held
constant across the step (zero-order hold), which matches how a control
loop applies its command between two samples.

The Butcher tableau for RK4 is:

.. math::

    \\begin{array}{c|cccc}
    0   &     &     &     &   \\\\
    1/2 & 1/2 &     &     &   \\\\
    1/2 &  0  & 1/2 &     &   \\\\
    1   &  0  &  0  &  1  &   \\\\
    \\hline
        & 1/6 & 1/3 & 1/3 & 1/6
    \\end{array}

The method achieves 4th-order accuracy, meaning the local truncation error
is :math:`O(h^5)` and the global error is :math:`O(h^4)`.
"""

from __future__ import annotations

from collections.abc import Callable

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_dtype


def rk4_step(
    f: Callable[[Array, Array], Array],
    x: ArrayLike,
    u: ArrayLike,
    dt: ArrayLike,
) -> Array:
    """Perform a single RK4 integration step.

    Advances the state by ``dt`` using the classic 4th-order Runge-Kutta
    method. Compatible with ``jax.jit`` and ``jax.vmap``.

    Args:
        f: ODE right-hand side ``f(x, u) -> dx/dt``.
        x: Current state vector of shape ``(n,)``.
        u: Control input of shape ``(p,)``, held constant over the step.
        dt: Timestep to take. May be negative for backward integration.

    Returns:
        jax.Array: State vector after ``dt``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ukfjax.integrators import rk4_step
        def double_integrator(x, u):
            return jnp.array([x[1], u[0]])
        x_next = rk4_step(double_integrator, jnp.zeros(2), jnp.array([1.0]), 0.02)
        x_next  # [0.0002, 0.02]
        ```
    """
    dtype = get_dtype()
    x = jnp.asarray(x, dtype=dtype)
    u = jnp.asarray(u, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)

    k1 = f(x, u)
    k2 = f(x + 0.5 * dt * k1, u)
    k3 = f(x + 0.5 * dt * k2, u)
    k4 = f(x + dt * k3, u)

    return x + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
