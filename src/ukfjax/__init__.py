"""
ukfjax is a small unscented Kalman filter library for nonlinear control-loop state estimation, implemented in JAX.
"""

from .config import (
    set_dtype,
    get_dtype,
    set_debug_checks,
    get_debug_checks,
)

from .noise import make_cov_matrix

from .jacobian import (
    numerical_jacobian,
    numerical_jacobian_x,
    numerical_jacobian_u,
)

from .integrators import rk4_step

from .discretization import (
    discretize_a,
    discretize_ab,
    discretize_aq,
    discretize_aq_taylor,
    discretize_r,
)

from .estimation import (
    UKFConfig,
    UKFState,
    FilterResult,
    num_sigmas,
    sigma_weights,
    sigma_points,
    unscented_transform,
    ukf_init,
    ukf_reset,
    ukf_predict,
    ukf_correct,
    UnscentedKalmanFilter,
)

__all__ = [
    # Config
    "set_dtype",
    "get_dtype",
    "set_debug_checks",
    "get_debug_checks",
    # Noise
    "make_cov_matrix",
    # Jacobians
    "numerical_jacobian",
    "numerical_jacobian_x",
    "numerical_jacobian_u",
    # Integrators
    "rk4_step",
    # Discretization
    "discretize_a",
    "discretize_ab",
    "discretize_aq",
    "discretize_aq_taylor",
    "discretize_r",
    # Estimation
    "UKFConfig",
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
]
