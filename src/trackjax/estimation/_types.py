"""Type definitions for the unscented filter.

Provides the core data types passed between the filter stages:

- :class:`FilterState`: Current filter state containing the state estimate
  and covariance matrix.
- :class:`SigmaPoints`: Augmented sigma points drawn from a filter state,
  with a flag reporting whether the matrix square root succeeded.
- :class:`Prediction`: Output of the prediction step, containing the
  predicted state and the propagated sigma points reused by the update.
- :class:`FilterResult`: Output of a measurement update, containing the
  updated state plus diagnostic information for filter tuning.

All types are :class:`~typing.NamedTuple` instances, which JAX treats as
pytrees automatically. This means they work seamlessly with ``jax.jit``,
``jax.vmap``, and ``jax.lax`` control flow primitives.

Numerical faults are carried as boolean ``valid`` arrays rather than
raised, since a traced computation cannot raise on data-dependent values.
"""

from __future__ import annotations

from typing import NamedTuple

from jax import Array


class FilterState(NamedTuple):
    """State of a Kalman filter.

    Attributes:
        x: State estimate vector of shape ``(n,)``.
        P: Error covariance matrix of shape ``(n, n)``. Must be symmetric
            positive semi-definite.
    """

    x: Array
    P: Array


class SigmaPoints(NamedTuple):
    """Sigma points of an augmented state distribution.

    Attributes:
        points: Sigma points of shape ``(2 n_aug + 1, n_aug)``. Row 0 is the
            augmented mean, rows ``1..n_aug`` are the positive
            perturbations and the remaining rows the negative ones.
        valid: Scalar boolean. ``False`` when the augmented covariance was
            not positive definite and the Cholesky factor is not finite.
    """

    points: Array
    valid: Array


class Prediction(NamedTuple):
    """Result of the unscented prediction step.

    Attributes:
        state: Predicted :class:`FilterState`.
        sigma_points: Propagated sigma points of shape ``(2 n_aug + 1, n)``
            in state space. The measurement update transforms these
            instead of redrawing points from ``state``.
        valid: Scalar boolean. ``False`` if sigma point generation failed
            or the predicted moments are not finite.
    """

    state: FilterState
    sigma_points: Array
    valid: Array


class FilterResult(NamedTuple):
    """Result of a filter measurement update step.

    Returned by ``ukf_update``. Contains the updated filter state along
    with diagnostic quantities useful for filter tuning and health
    monitoring.

    Attributes:
        state: Updated :class:`FilterState` after incorporating the
            measurement.
        innovation: Measurement residual ``z - z_pred`` of shape ``(m,)``,
            with any bearing component wrapped into ``(-pi, pi]``.
        innovation_covariance: Innovation covariance ``S`` of shape
            ``(m, m)``.
        kalman_gain: Kalman gain matrix ``K`` of shape ``(n, m)``.
        nis: Normalized innovation squared
            ``innovation.T @ S^{-1} @ innovation``. Follows a chi-squared
            distribution with ``m`` degrees of freedom for a consistent
            filter.
        valid: Scalar boolean. ``False`` if the innovation covariance could
            not be inverted or the updated state is not finite.
    """

    state: FilterState
    innovation: Array
    innovation_covariance: Array
    kalman_gain: Array
    nis: Array
    valid: Array
