"""Unscented state estimation building blocks.

Provides the augmented Unscented Kalman Filter (UKF) used by the CTRV
tracker. Measurement models are in the :mod:`trackjax.measurements`
module and the motion model in :mod:`trackjax.dynamics`.

Available components:

- :class:`FilterState` -- Filter state (estimate and covariance)
- :class:`SigmaPoints` -- Augmented sigma points with validity flag
- :class:`Prediction` -- Prediction result with propagated sigma points
- :class:`FilterResult` -- Update result with diagnostics
- :func:`sigma_weights` -- Unscented transform weights
- :func:`augment` -- Augmented mean and covariance
- :func:`augmented_sigma_points` -- Sigma point generation (Cholesky)
- :func:`unscented_mean_covariance` -- Sigma point recombination
- :func:`ukf_predict` -- UKF state propagation (sigma point transform)
- :func:`ukf_update` -- UKF measurement update (sigma point transform)
- :func:`covariance_is_valid` -- Covariance symmetry and PSD check
- :func:`repair_covariance` -- Negative eigenvalue clipping

All functions are compatible with ``jax.jit`` and ``jax.lax.scan`` for
efficient sequential filtering.
"""

from trackjax.estimation._types import FilterResult, FilterState, Prediction, SigmaPoints
from trackjax.estimation.ukf import (
    augment,
    augmented_sigma_points,
    covariance_is_valid,
    repair_covariance,
    sigma_weights,
    ukf_predict,
    ukf_update,
    unscented_mean_covariance,
)

__all__ = [
    "FilterState",
    "SigmaPoints",
    "Prediction",
    "FilterResult",
    "sigma_weights",
    "augment",
    "augmented_sigma_points",
    "covariance_is_valid",
    "repair_covariance",
    "unscented_mean_covariance",
    "ukf_predict",
    "ukf_update",
]
