"""Unscented Kalman filtering for nonlinear continuous-time systems.

Provides the unscented Kalman filter and the sigma point machinery it is
built from, for sequential state estimation in control loops.

Available components:

- :class:`UKFConfig` -- Sigma point spread configuration
- :class:`SigmaWeights` -- Sigma point mean and covariance weights
- :class:`UKFState` -- Filter state (estimate, covariance, cached sigma points)
- :class:`FilterResult` -- Correct result with diagnostics
- :func:`num_sigmas`, :func:`sigma_weights`, :func:`sigma_points` --
  Van der Merwe scaled sigma points
- :func:`unscented_transform` -- Weighted mean and covariance of sigma points
- :func:`ukf_init`, :func:`ukf_reset` -- Filter state construction
- :func:`ukf_predict` -- Time update (RK4 sigma point propagation)
- :func:`ukf_correct` -- Measurement update
- :class:`UnscentedKalmanFilter` -- Stateful wrapper for imperative loops
- :class:`CovarianceHealth`, :func:`covariance_health`,
  :func:`log_covariance_health` -- Numerical health checks

The functional forms are compatible with ``jax.jit`` and ``jax.lax.scan``
for efficient sequential filtering.
"""

from ukfjax.estimation._types import FilterResult, SigmaWeights, UKFConfig, UKFState
from ukfjax.estimation.diagnostics import (
    CovarianceHealth,
    covariance_health,
    log_covariance_health,
)
from ukfjax.estimation.sigma_points import num_sigmas, sigma_points, sigma_weights
from ukfjax.estimation.ukf import (
    UnscentedKalmanFilter,
    ukf_correct,
    ukf_init,
    ukf_predict,
    ukf_reset,
)
from ukfjax.estimation.unscented_transform import unscented_transform

__all__ = [
    "UKFConfig",
    "SigmaWeights",
    "UKFState",
    "FilterResult",
    "num_sigmas",
    "sigma_weights",
    "sigma_points",
    "unscented_transform",
    "ukf_init",
    "ukf_reset",
    "ukf_predict",
    "ukf_correct",
    "UnscentedKalmanFilter",
    "CovarianceHealth",
    "covariance_health",
    "log_covariance_health",
]
