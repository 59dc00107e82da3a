"""Unscented Kalman Filter (UKF) predict and correct.

Implements a continuous-time-model unscented Kalman filter for control
loops. The dynamics ``f(x, u)`` return the state derivative; every
predict integrates each sigma point over ``dt`` with RK4 and injects
process noise discretized for that same ``dt``. The measurement model
``h(x, u)`` returns the expected measurement.

The filter carries the propagated sigma points from a predict to the
corrects that follow it. The cross-covariance in a correct pairs those
cached points with measurement-space points re-sampled from the current
estimate, so several corrects (different sensors, different measurement
dimensions) may follow one predict.

Two forms are provided:

- :func:`ukf_predict` / :func:`ukf_correct` are pure functions over a
  :class:`UKFState`, compatible with ``jax.jit`` and ``jax.lax.scan``.
- :class:`UnscentedKalmanFilter` owns a :class:`UKFState` and mutates it
  in place, for use in an imperative control loop.

Numerical failure is never raised. A singular innovation covariance or an
indefinite ``P`` shows up as NaN/Inf in the estimate; see
:mod:`ukfjax.estimation.diagnostics`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from functools import partial

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ukfjax.config import get_debug_checks, get_dtype
from ukfjax.discretization import discretize_aq_taylor, discretize_r
from ukfjax.estimation._types import FilterResult, UKFConfig, UKFState
from ukfjax.estimation.diagnostics import log_covariance_health
from ukfjax.estimation.sigma_points import num_sigmas, sigma_points, sigma_weights
from ukfjax.estimation.unscented_transform import unscented_transform
from ukfjax.integrators import rk4_step
from ukfjax.jacobian import numerical_jacobian_x
from ukfjax.noise import make_cov_matrix

logger = logging.getLogger(__name__)

_DEFAULT_UKF_CONFIG = UKFConfig()


def ukf_init(n_states: int, cont_R: ArrayLike, dt: ArrayLike) -> UKFState:
    """Create a zeroed filter state.

    Args:
        n_states: State dimension ``n``.
        cont_R: Continuous measurement noise covariance of shape ``(m, m)``.
        dt: Nominal timestep used to seed the discrete measurement noise.

    Returns:
        UKFState: Zero estimate, zero covariance, zero cached sigma points,
            and ``disc_R = cont_R / dt``.
    """
    dtype = get_dtype()
    return UKFState(
        x=jnp.zeros(n_states, dtype=dtype),
        P=jnp.zeros((n_states, n_states), dtype=dtype),
        sigmas_f=jnp.zeros((num_sigmas(n_states), n_states), dtype=dtype),
        disc_R=discretize_r(cont_R, dt),
    )


def ukf_reset(state: UKFState) -> UKFState:
    """Zero the estimate, covariance and cached sigma points.

    ``disc_R`` is kept.

    Args:
        state: Current filter state.

    Returns:
        UKFState: Reset filter state.
    """
    return state._replace(
        x=jnp.zeros_like(state.x),
        P=jnp.zeros_like(state.P),
        sigmas_f=jnp.zeros_like(state.sigmas_f),
    )


def ukf_predict(
    state: UKFState,
    f: Callable[[Array, Array], Array],
    u: ArrayLike,
    dt: ArrayLike,
    cont_Q: ArrayLike,
    cont_R: ArrayLike,
    config: UKFConfig = _DEFAULT_UKF_CONFIG,
) -> UKFState:
    """Project the estimate forward by ``dt`` under control input ``u``.

    Linearizes ``f`` about the current estimate to discretize the process
    noise, propagates sigma points through one RK4 step, reassembles the
    mean and covariance, and adds the discrete process noise. Sigma points
    carry no noise themselves; noise enters only through that additive
    term. The propagated sigma points are cached in ``sigmas_f`` and the
    discrete measurement noise is refreshed for ``dt``.

    Args:
        state: Current filter state.
        f: Continuous dynamics ``f(x, u) -> dx/dt``. Applied to each sigma
            point via ``jax.vmap``.
        u: Control input of shape ``(p,)``, held over the step.
        dt: Timestep, ``> 0``.
        cont_Q: Continuous process noise covariance of shape ``(n, n)``.
        cont_R: Continuous measurement noise covariance of shape ``(m, m)``.
        config: Sigma point configuration. Default: ``UKFConfig()``.

    Returns:
        UKFState: Predicted state with ``x``, ``P``, ``sigmas_f`` and
            ``disc_R`` all updated.

    Examples:
        ```python
        import jax.numpy as jnp
        from ukfjax.estimation import ukf_init, ukf_predict
        from ukfjax.noise import make_cov_matrix

        def f(x, u):
            return jnp.array([x[1], u[0]])

        Q = make_cov_matrix([0.01, 0.1])
        R = make_cov_matrix([0.05])
        state = ukf_init(2, R, 0.02)._replace(P=jnp.eye(2))
        state = ukf_predict(state, f, jnp.array([1.0]), 0.02, Q, R)
        ```
    """
    dtype = get_dtype()
    x = jnp.asarray(state.x, dtype=dtype)
    P = jnp.asarray(state.P, dtype=dtype)
    u = jnp.asarray(u, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)
    n = x.shape[0]

    # Discretize Q about the current estimate before projecting forward
    cont_A = numerical_jacobian_x(f, x, u)
    _, disc_Q = discretize_aq_taylor(cont_A, cont_Q, dt)

    points = sigma_points(x, P, config)
    Wm, Wc = sigma_weights(n, config)

    sigmas_f = jax.vmap(lambda s: rk4_step(f, s, u, dt))(points)

    x_pred, P_pred = unscented_transform(sigmas_f, Wm, Wc)

    return UKFState(
        x=x_pred,
        P=P_pred + disc_Q,
        sigmas_f=sigmas_f,
        disc_R=discretize_r(cont_R, dt),
    )


def ukf_correct(
    state: UKFState,
    u: ArrayLike,
    y: ArrayLike,
    h: Callable[[Array, Array], Array],
    R: ArrayLike,
    config: UKFConfig = _DEFAULT_UKF_CONFIG,
) -> FilterResult:
    """Incorporate a measurement into the filter state.

    Re-samples sigma points from the current ``(x, P)``, which may already
    include an earlier correct from the same cycle, and maps them through
    ``h``. The cross-covariance pairs the sigma points cached by the last
    predict with those measurement-space points. The gain solves
    ``Py^T K^T = Pxy^T`` rather than forming an inverse. The solve does
    not require ``Py`` to be positive definite, so a negative ``Wc[0]``
    (small ``alpha``) that leaves ``Py`` indefinite still gives a gain.

    Calling this before any predict uses all-zero cached sigma points,
    which is valid: the cross-covariance is degenerate but finite.

    Args:
        state: Current filter state, typically from ``ukf_predict``.
        u: Control input used in the preceding predict, shape ``(p,)``.
        y: Measurement vector of shape ``(m,)``.
        h: Measurement model ``h(x, u) -> y_hat`` returning shape ``(m,)``.
            Applied to each sigma point via ``jax.vmap``.
        R: Measurement noise covariance of shape ``(m, m)``, used as is.
        config: Sigma point configuration. Must match the config used in
            ``ukf_predict``. Default: ``UKFConfig()``.

    Returns:
        FilterResult: Corrected state, innovation, innovation covariance,
            and Kalman gain. ``sigmas_f`` and ``disc_R`` pass through
            unchanged.

    Examples:
        ```python
        import jax.numpy as jnp
        from ukfjax.estimation import ukf_correct, ukf_init

        def h(x, u):
            return x[:1]

        state = ukf_init(2, jnp.eye(1), 0.02)._replace(P=jnp.eye(2))
        result = ukf_correct(state, jnp.zeros(1), jnp.array([0.3]), h, jnp.eye(1) * 0.01)
        result.state.x
        ```
    """
    dtype = get_dtype()
    x = jnp.asarray(state.x, dtype=dtype)
    P = jnp.asarray(state.P, dtype=dtype)
    sigmas_f = jnp.asarray(state.sigmas_f, dtype=dtype)
    u = jnp.asarray(u, dtype=dtype)
    y = jnp.asarray(y, dtype=dtype)
    R = jnp.asarray(R, dtype=dtype)
    n = x.shape[0]

    # Transform sigma points into measurement space
    points = sigma_points(x, P, config)
    Wm, Wc = sigma_weights(n, config)
    sigmas_h = jax.vmap(lambda s: h(s, u))(points)

    # Mean and covariance of prediction passed through UT
    y_hat, Py = unscented_transform(sigmas_h, Wm, Wc)
    Py = Py + R

    # Cross-covariance of the propagated state and the measurements
    x_diff = sigmas_f - x[None, :]
    y_diff = sigmas_h - y_hat[None, :]
    Pxy = jnp.einsum("i,ij,ik->jk", Wc, x_diff, y_diff)

    # K = Pxy Py^-1  <=>  Py^T K^T = Pxy^T
    K = jnp.linalg.solve(Py.T, Pxy.T).T

    innovation = y - y_hat

    return FilterResult(
        state=state._replace(
            x=x + K @ innovation,
            P=P - K @ Py @ K.T,
        ),
        innovation=innovation,
        innovation_covariance=Py,
        kalman_gain=K,
    )


class UnscentedKalmanFilter:
    """Stateful unscented Kalman filter for an imperative control loop.

    Owns the estimate, covariance, cached propagated sigma points and
    discrete measurement noise, and updates them in place. Each control
    cycle calls :meth:`predict` once, then :meth:`correct` zero or more
    times, possibly with different measurement models and dimensions.

    Instances are not thread-safe; serialize all calls.

    Args:
        f: Continuous dynamics ``f(x, u) -> dx/dt``.
        h: Default measurement model ``h(x, u) -> y``.
        state_std_devs: Process noise standard deviation of each state.
        measurement_std_devs: Noise standard deviation of each channel of
            the default measurement.
        dt: Nominal timestep, used to seed the discrete measurement noise
            until the first :meth:`predict`.
        config: Sigma point configuration. Default: ``UKFConfig()``.
        jit: Compile predict and correct with ``jax.jit``. Default: ``True``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ukfjax import UnscentedKalmanFilter

        def f(x, u):
            return jnp.array([x[1], u[0]])

        def h(x, u):
            return x[:1]

        ukf = UnscentedKalmanFilter(f, h, [0.01, 0.1], [0.05], dt=0.02)
        ukf.P = jnp.eye(2)
        ukf.predict(jnp.array([1.0]), 0.02)
        ukf.correct(jnp.array([1.0]), jnp.array([0.001]))
        ukf.xhat
        ```
    """

    def __init__(
        self,
        f: Callable[[Array, Array], Array],
        h: Callable[[Array, Array], Array],
        state_std_devs: Sequence[float] | ArrayLike,
        measurement_std_devs: Sequence[float] | ArrayLike,
        dt: float,
        config: UKFConfig = _DEFAULT_UKF_CONFIG,
        jit: bool = True,
    ) -> None:
        self._f = f
        self._h = h
        self._config = config

        self._cont_Q = make_cov_matrix(state_std_devs)
        self._cont_R = make_cov_matrix(measurement_std_devs)

        self._state = ukf_init(self._cont_Q.shape[0], self._cont_R, dt)

        predict = partial(ukf_predict, f=f, config=config)
        correct = partial(ukf_correct, config=config)
        if jit:
            predict = jax.jit(predict)
            correct = jax.jit(correct, static_argnames=("h",))
        self._predict = predict
        self._correct = correct

        logger.debug(
            "Created UKF with %d states and %d outputs (jit=%s)",
            self.n_states,
            self.n_outputs,
            jit,
        )

    @property
    def n_states(self) -> int:
        """Dimension of the state vector."""
        return self._cont_Q.shape[0]

    @property
    def n_outputs(self) -> int:
        """Dimension of the default measurement."""
        return self._cont_R.shape[0]

    @property
    def state(self) -> UKFState:
        """The full filter state as a :class:`UKFState`."""
        return self._state

    @property
    def xhat(self) -> Array:
        """State estimate x-hat of shape ``(n,)``."""
        return self._state.x

    @xhat.setter
    def xhat(self, value: ArrayLike) -> None:
        self._state = self._state._replace(x=jnp.asarray(value, dtype=get_dtype()))

    def xhat_element(self, i: int) -> float:
        """Return element ``i`` of the state estimate."""
        return float(self._state.x[i])

    def set_xhat_element(self, i: int, value: float) -> None:
        """Overwrite element ``i`` of the state estimate."""
        self._state = self._state._replace(x=self._state.x.at[i].set(value))

    @property
    def P(self) -> Array:
        """Error covariance matrix P of shape ``(n, n)``.

        The setter does not check symmetry or positive semi-definiteness.
        """
        return self._state.P

    @P.setter
    def P(self, value: ArrayLike) -> None:
        self._state = self._state._replace(P=jnp.asarray(value, dtype=get_dtype()))

    def P_element(self, i: int, j: int) -> float:
        """Return element ``(i, j)`` of the error covariance."""
        return float(self._state.P[i, j])

    @property
    def sigmas_f(self) -> Array:
        """Sigma points propagated by the last predict, shape ``(2n+1, n)``."""
        return self._state.sigmas_f

    @property
    def disc_R(self) -> Array:
        """Discrete measurement noise for the last predict's timestep."""
        return self._state.disc_R

    @property
    def cont_Q(self) -> Array:
        """Continuous process noise covariance."""
        return self._cont_Q

    @property
    def cont_R(self) -> Array:
        """Continuous measurement noise covariance."""
        return self._cont_R

    def reset(self) -> None:
        """Zero the estimate, covariance and cached sigma points.

        The models and noise covariances are kept.
        """
        self._state = ukf_reset(self._state)
        logger.debug("UKF reset")

    def predict(self, u: ArrayLike, dt: float) -> None:
        """Project the model into the future with a new control input.

        Args:
            u: New control input from the controller, shape ``(p,)``.
            dt: Timestep for prediction, ``> 0``.
        """
        self._state = self._predict(
            self._state,
            u=u,
            dt=dt,
            cont_Q=self._cont_Q,
            cont_R=self._cont_R,
        )
        if get_debug_checks():
            log_covariance_health(self._state.P, "P")

    def correct(
        self,
        u: ArrayLike,
        y: ArrayLike,
        h: Callable[[Array, Array], Array] | None = None,
        R: ArrayLike | None = None,
    ) -> FilterResult:
        """Correct the state estimate using the measurement ``y``.

        Without ``h`` and ``R`` the default measurement model and the
        discrete measurement noise of the last predict are used. A custom
        ``h`` may return a different number of measurements than the
        default one; it must come with its own ``R``.

        Args:
            u: Same control input used in the predict step.
            y: Measurement vector.
            h: Measurement model ``h(x, u) -> y_hat``. Default: the model
                passed to the constructor.
            R: Measurement noise covariance matrix. Default: ``disc_R``.

        Returns:
            FilterResult: Corrected state and diagnostics.

        Raises:
            ValueError: If ``h`` is given without ``R``.
        """
        if h is None:
            h = self._h
        elif R is None:
            raise ValueError("A custom measurement function requires its own R")
        if R is None:
            R = self._state.disc_R

        result = self._correct(self._state, u=u, y=y, h=h, R=R)
        self._state = result.state

        if get_debug_checks():
            log_covariance_health(result.innovation_covariance, "Py")
            log_covariance_health(self._state.P, "P")

        return result
