"""Type definitions for the unscented Kalman filter.

Provides the core data types used across the estimation implementation:

- :class:`UKFConfig`: Sigma point spread and weighting parameters.
- :class:`SigmaWeights`: Mean and covariance weights of a sigma point set.
- :class:`UKFState`: Everything the filter carries between calls: the
  estimate, its covariance, the propagated sigma points cached by the
  last predict, and the discrete measurement noise for the last timestep.
- :class:`FilterResult`: Output of a correct step, containing the updated
  state plus diagnostic information for filter tuning.

All types are :class:`~typing.NamedTuple` instances, which JAX treats as
pytrees automatically. This means they work seamlessly with ``jax.jit``,
``jax.vmap``, and ``jax.lax`` control flow primitives.
"""

from __future__ import annotations

from typing import NamedTuple

from jax import Array


class UKFConfig(NamedTuple):
    """Configuration for the Van der Merwe scaled sigma points.

    Default values ``alpha=1.0``, ``beta=2.0``, ``kappa=0.0`` produce
    unit-spread sigma points with well-conditioned weights, robust for
    float32 across all state dimensions. A tighter spread such as
    ``alpha=1e-3, kappa=3 - n`` produces weights of order ``1e6`` and
    should only be used with float64.

    Attributes:
        alpha: Spread of sigma points around the mean. Default: 1.0.
        beta: Prior knowledge of the state distribution. ``beta=2.0``
            is optimal for Gaussian distributions. Default: 2.0.
        kappa: Secondary scaling parameter. Default: 0.0.
    """

    alpha: float = 1.0
    beta: float = 2.0
    kappa: float = 0.0


class SigmaWeights(NamedTuple):
    """Weights of a ``2n + 1`` sigma point set.

    Attributes:
        Wm: Mean weights of shape ``(2n+1,)``. Sum to one.
        Wc: Covariance weights of shape ``(2n+1,)``.
    """

    Wm: Array
    Wc: Array


class UKFState(NamedTuple):
    """State carried by the unscented Kalman filter between calls.

    Sigma points are stored row-wise: row ``i`` is sigma point ``i``.

    Attributes:
        x: State estimate vector of shape ``(n,)``.
        P: Error covariance matrix of shape ``(n, n)``. Should be
            symmetric positive semi-definite; this is not enforced.
        sigmas_f: Sigma points after the last predict's propagation
            through the dynamics, shape ``(2n+1, n)``. Zero until the
            first predict. Read by every correct until the next predict
            overwrites it.
        disc_R: Discrete measurement noise covariance for the timestep of
            the last predict, shape ``(m, m)``. Used by a correct that
            does not supply its own ``R``.
    """

    x: Array
    P: Array
    sigmas_f: Array
    disc_R: Array


class FilterResult(NamedTuple):
    """Result of a filter measurement correction step.

    Returned by ``ukf_correct`` and ``UnscentedKalmanFilter.correct``.
    Contains the updated filter state along with diagnostic quantities
    useful for filter tuning and health monitoring.

    Attributes:
        state: Updated :class:`UKFState` after incorporating the
            measurement. ``sigmas_f`` and ``disc_R`` are unchanged.
        innovation: Measurement residual ``y - y_hat`` of shape ``(m,)``.
            Should be zero-mean and consistent with ``innovation_covariance``
            for a healthy filter.
        innovation_covariance: Innovation covariance ``Py`` of shape
            ``(m, m)``, measurement noise included.
        kalman_gain: Kalman gain matrix ``K`` of shape ``(n, m)``.
    """

    state: UKFState
    innovation: Array
    innovation_covariance: Array
    kalman_gain: Array
