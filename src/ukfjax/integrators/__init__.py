"""Fixed-step ODE integration for continuous-time system models.

Available integrators:

- :func:`rk4_step` -- Classic 4th-order Runge-Kutta (fixed step)

Step functions share the interface::

    x_next = step_fn(f, x, u, dt)

where ``f(x, u) -> dx/dt`` defines the ODE right-hand side and the
control input ``u`` is held constant over the step.
"""

from ukfjax.integrators.rk4 import rk4_step

__all__ = [
    "rk4_step",
]
