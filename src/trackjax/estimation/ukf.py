"""Unscented Kalman Filter (UKF) predict and update functions.

Implements the augmented unscented Kalman filter used by the CTRV tracker.
Process noise is not added as a covariance term after propagation; it is
carried through the nonlinear motion model as two extra state dimensions
(longitudinal and yaw acceleration), so the augmented state has
``n_aug = 7`` dimensions and ``2 n_aug + 1 = 15`` sigma points.

The sigma point spread uses ``lambda = 3 - n_aug`` with weights

.. math::

    w_0 = \\frac{\\lambda}{\\lambda + n_{aug}}, \\quad
    w_i = \\frac{1}{2 (\\lambda + n_{aug})}

shared by the mean and the covariance.  Angular components of every
residual (heading in state space, bearing in radar measurement space) are
wrapped into ``(-pi, pi]`` before they are weighted.

The Cholesky factorization and the inversion of the innovation covariance
are the two numerically sensitive steps.  Neither raises: the returned
named tuples carry a ``valid`` flag that is ``False`` when the factor,
gain or updated moments are not finite, so callers can apply a recovery
policy deterministically.

These are building-block functions designed to compose with ``jax.jit``
and ``jax.lax.scan``.  See :mod:`trackjax.tracker` for the stateful
orchestration.
"""

from __future__ import annotations

from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from trackjax.config import get_covariance_tolerance, get_dtype
from trackjax.constants import N_AUG, YAW_INDEX
from trackjax.dynamics.ctrv import ctrv_propagate_sigma_points
from trackjax.estimation._types import FilterResult, FilterState, Prediction, SigmaPoints
from trackjax.measurements._types import MeasurementModel
from trackjax.utils._angle import normalize_component


def sigma_weights(n_aug: int = N_AUG) -> Array:
    """Return the sigma point weights of the augmented unscented transform.

    Args:
        n_aug: Augmented state dimension. Default: ``7``.

    Returns:
        jax.Array: Weights of shape ``(2 n_aug + 1,)``, summing to one.
    """
    dtype = get_dtype()
    lam = 3 - n_aug
    w0 = lam / (lam + n_aug)
    wi = 0.5 / (lam + n_aug)
    return jnp.concatenate(
        [jnp.array([w0], dtype=dtype), jnp.full(2 * n_aug, wi, dtype=dtype)]
    )


def augment(x: ArrayLike, P: ArrayLike, process_noise_std: ArrayLike) -> FilterState:
    """Build the augmented mean and covariance.

    The state mean is padded with zero-mean noise components and the
    process noise variances are placed on the added diagonal entries.

    Args:
        x: State mean of shape ``(n,)``.
        P: State covariance of shape ``(n, n)``.
        process_noise_std: Noise standard deviations of shape ``(q,)``.

    Returns:
        FilterState: Augmented mean ``(n + q,)`` and block-diagonal
            covariance ``(n + q, n + q)``.
    """
    dtype = get_dtype()
    x = jnp.asarray(x, dtype=dtype)
    P = jnp.asarray(P, dtype=dtype)
    std = jnp.atleast_1d(jnp.asarray(process_noise_std, dtype=dtype))

    n = x.shape[0]
    q = std.shape[0]

    x_aug = jnp.concatenate([x, jnp.zeros(q, dtype=dtype)])
    P_aug = jnp.zeros((n + q, n + q), dtype=dtype)
    P_aug = P_aug.at[:n, :n].set(P)
    P_aug = P_aug.at[n:, n:].set(jnp.diag(std**2))

    return FilterState(x=x_aug, P=P_aug)


def augmented_sigma_points(
    x: ArrayLike,
    P: ArrayLike,
    process_noise_std: ArrayLike,
) -> SigmaPoints:
    """Generate the sigma points of the augmented state.

    Computes the lower Cholesky factor ``L`` of the augmented covariance
    and returns ``x_aug``, ``x_aug + c L[:, i]`` and ``x_aug - c L[:, i]``
    with ``c = sqrt(lambda + n_aug)``.

    A jitter of ``100 * eps`` is added to the diagonal so that a
    positive semi-definite covariance with exact zeros (for example zero
    process noise) still factorizes.  A covariance with negative
    eigenvalues yields a non-finite factor and ``valid == False``.

    Args:
        x: State mean of shape ``(n,)``.
        P: State covariance of shape ``(n, n)``.
        process_noise_std: Process noise standard deviations, typically
            ``[std_a, std_yawdd]``.

    Returns:
        SigmaPoints: Points of shape ``(2 n_aug + 1, n_aug)`` and the
            validity flag.

    Examples:
        ```python
        import jax.numpy as jnp
        from trackjax.estimation import augmented_sigma_points

        sp = augmented_sigma_points(jnp.zeros(5), jnp.eye(5), jnp.array([3.0, 2.0]))
        sp.points.shape  # (15, 7)
        ```
    """
    dtype = get_dtype()
    aug = augment(x, P, process_noise_std)
    n_aug = aug.x.shape[0]
    lam = 3 - n_aug

    eps = jnp.finfo(dtype).eps * 100.0
    L = jnp.linalg.cholesky(aug.P + eps * jnp.eye(n_aug, dtype=dtype))
    valid = jnp.all(jnp.isfinite(L))

    c = jnp.sqrt(jnp.asarray(lam + n_aug, dtype=dtype))
    points = jnp.concatenate(
        [aug.x[None, :], aug.x[None, :] + c * L.T, aug.x[None, :] - c * L.T],
        axis=0,
    )

    return SigmaPoints(points=points, valid=valid)


def unscented_mean_covariance(
    points: ArrayLike,
    weights: ArrayLike,
    angle_index: int | None = None,
) -> FilterState:
    """Recombine sigma points into a mean and covariance.

    Args:
        points: Sigma points of shape ``(k, n)``.
        weights: Sigma point weights of shape ``(k,)``.
        angle_index: Index of an angular component whose residuals are
            wrapped into ``(-pi, pi]`` before use, or ``None``.

    Returns:
        FilterState: Weighted mean ``(n,)`` and covariance ``(n, n)``.
    """
    dtype = get_dtype()
    points = jnp.asarray(points, dtype=dtype)
    weights = jnp.asarray(weights, dtype=dtype)

    mean = jnp.einsum("i,ij->j", weights, points)
    diff = normalize_component(points - mean[None, :], angle_index)
    cov = jnp.einsum("i,ij,ik->jk", weights, diff, diff)

    return FilterState(x=mean, P=cov)


def ukf_predict(
    filter_state: FilterState,
    dt: ArrayLike,
    process_noise_std: ArrayLike,
    propagate_fn: Callable[[Array, Array], Array] = ctrv_propagate_sigma_points,
    angle_index: int | None = YAW_INDEX,
) -> Prediction:
    """Propagate the filter state forward by ``dt`` using sigma points.

    Draws augmented sigma points from the current state, propagates them
    through ``propagate_fn`` and recombines the predicted points into the
    predicted mean and covariance.

    Args:
        filter_state: Current filter state ``(x, P)``.
        dt: Elapsed time in seconds. Must be non-negative.
        process_noise_std: Process noise standard deviations
            ``[std_a, std_yawdd]``.
        propagate_fn: Function ``f(points, dt) -> predicted_points`` mapping
            augmented sigma points ``(k, n_aug)`` to state space
            ``(k, n)``. Default: CTRV motion model.
        angle_index: Index of the heading in the state vector. Default: 3.

    Returns:
        Prediction: Predicted state, predicted sigma points and the
            validity flag.

    Examples:
        ```python
        import jax.numpy as jnp
        from trackjax.estimation import FilterState, ukf_predict

        fs = FilterState(x=jnp.array([1.0, 1.0, 2.0, 0.1, 0.0]), P=jnp.eye(5) * 0.1)
        pred = ukf_predict(fs, 0.05, jnp.array([3.0, 2.0]))
        pred.sigma_points.shape  # (15, 5)
        ```
    """
    dtype = get_dtype()
    x = jnp.asarray(filter_state.x, dtype=dtype)
    P = jnp.asarray(filter_state.P, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)

    sigma = augmented_sigma_points(x, P, process_noise_std)
    weights = sigma_weights(sigma.points.shape[1])

    predicted = propagate_fn(sigma.points, dt)
    moments = unscented_mean_covariance(predicted, weights, angle_index)

    valid = (
        sigma.valid
        & jnp.all(jnp.isfinite(moments.x))
        & jnp.all(jnp.isfinite(moments.P))
    )

    return Prediction(state=moments, sigma_points=predicted, valid=valid)


def ukf_update(
    prediction: Prediction,
    z: ArrayLike,
    model: MeasurementModel,
    state_angle_index: int | None = YAW_INDEX,
) -> FilterResult:
    """Incorporate a measurement into the predicted state.

    Transforms the predicted sigma points into measurement space with
    ``model.measurement_fn`` and computes the Kalman gain from the
    cross-correlation between state and measurement residuals.

    Args:
        prediction: Output of :func:`ukf_predict`.
        z: Measurement vector of shape ``(m,)``.
        model: Sensor description (transform, noise, angle index).
        state_angle_index: Index of the heading in the state vector,
            wrapped after the correction. Default: 3.

    Returns:
        FilterResult: Updated state, innovation, innovation covariance,
            Kalman gain, NIS and validity flag.

    Examples:
        ```python
        import jax.numpy as jnp
        from trackjax.estimation import FilterState, ukf_predict, ukf_update
        from trackjax.measurements import position_model

        fs = FilterState(x=jnp.array([1.0, 1.0, 2.0, 0.1, 0.0]), P=jnp.eye(5) * 0.1)
        pred = ukf_predict(fs, 0.05, jnp.array([3.0, 2.0]))
        result = ukf_update(pred, jnp.array([1.1, 1.0]), position_model())
        ```
    """
    dtype = get_dtype()
    x = jnp.asarray(prediction.state.x, dtype=dtype)
    P = jnp.asarray(prediction.state.P, dtype=dtype)
    X = jnp.asarray(prediction.sigma_points, dtype=dtype)
    z = jnp.asarray(z, dtype=dtype)
    R = jnp.asarray(model.noise, dtype=dtype)

    weights = sigma_weights((X.shape[0] - 1) // 2)

    # Transform sigma points into measurement space
    Z = jax.vmap(model.measurement_fn)(X)

    # Predicted measurement and innovation covariance
    z_pred = jnp.einsum("i,ij->j", weights, Z)
    z_diff = normalize_component(Z - z_pred[None, :], model.angle_index)
    S = jnp.einsum("i,ij,ik->jk", weights, z_diff, z_diff) + R

    # Cross-correlation between state and measurement
    x_diff = normalize_component(X - x[None, :], state_angle_index)
    Tc = jnp.einsum("i,ij,ik->jk", weights, x_diff, z_diff)

    # Kalman gain: K = Tc @ S^{-1}
    K = jnp.linalg.solve(S, Tc.T).T

    innovation = normalize_component(z - z_pred, model.angle_index)

    x_upd = normalize_component(x + K @ innovation, state_angle_index)
    P_upd = P - K @ S @ K.T
    P_upd = 0.5 * (P_upd + P_upd.T)

    nis = innovation @ jnp.linalg.solve(S, innovation)

    well_conditioned = jnp.linalg.cond(S) < 1.0 / jnp.finfo(dtype).eps
    valid = (
        well_conditioned
        & jnp.all(jnp.isfinite(K))
        & jnp.all(jnp.isfinite(x_upd))
        & jnp.all(jnp.isfinite(P_upd))
    )

    return FilterResult(
        state=FilterState(x=x_upd, P=P_upd),
        innovation=innovation,
        innovation_covariance=S,
        kalman_gain=K,
        nis=nis,
        valid=valid,
    )


def covariance_is_valid(P: ArrayLike, tol: float | None = None) -> Array:
    """Check that a covariance matrix is finite, symmetric and PSD.

    Both the symmetry error and the most negative eigenvalue are compared
    against ``tol * max(1, max |diag(P)|)``.

    Args:
        P: Covariance matrix of shape ``(n, n)``.
        tol: Relative tolerance. Default:
            :func:`~trackjax.config.get_covariance_tolerance`.

    Returns:
        jax.Array: Scalar boolean.
    """
    dtype = get_dtype()
    P = jnp.asarray(P, dtype=dtype)
    if tol is None:
        tol = get_covariance_tolerance()

    scale = jnp.maximum(1.0, jnp.max(jnp.abs(jnp.diag(P))))
    finite = jnp.all(jnp.isfinite(P))
    P_safe = jnp.where(finite, P, jnp.eye(P.shape[0], dtype=dtype))

    symmetric = jnp.max(jnp.abs(P_safe - P_safe.T)) <= tol * scale
    eigvals = jnp.linalg.eigvalsh(0.5 * (P_safe + P_safe.T))
    psd = jnp.min(eigvals) >= -tol * scale

    return finite & symmetric & psd


def repair_covariance(P: ArrayLike) -> Array:
    """Clip the negative eigenvalues of a covariance matrix.

    Round-off can leave an updated covariance with eigenvalues slightly
    below zero, which :func:`augmented_sigma_points` cannot factorize.
    When the smallest eigenvalue of the symmetrized matrix is negative,
    every eigenvalue is raised to at least ``100 * eps * max(1, max
    |diag(P)|)`` and the matrix is rebuilt from its eigenvectors.
    Positive semi-definite and non-finite matrices are returned
    symmetrized but otherwise unchanged.

    Args:
        P: Covariance matrix of shape ``(n, n)``.

    Returns:
        jax.Array: Symmetric covariance of shape ``(n, n)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from trackjax.estimation import repair_covariance

        P = repair_covariance(jnp.diag(jnp.array([1.0, -1e-11])))
        jnp.linalg.eigvalsh(P).min() > 0  # True
        ```
    """
    dtype = get_dtype()
    P = jnp.asarray(P, dtype=dtype)
    P = 0.5 * (P + P.T)

    finite = jnp.all(jnp.isfinite(P))
    P_safe = jnp.where(finite, P, jnp.eye(P.shape[0], dtype=dtype))

    eigvals, eigvecs = jnp.linalg.eigh(P_safe)
    scale = jnp.maximum(1.0, jnp.max(jnp.abs(jnp.diag(P_safe))))
    floor = jnp.finfo(dtype).eps * 100.0 * scale

    P_fixed = (eigvecs * jnp.maximum(eigvals, floor)[None, :]) @ eigvecs.T
    P_fixed = 0.5 * (P_fixed + P_fixed.T)

    return jnp.where(finite & (jnp.min(eigvals) < 0.0), P_fixed, P)
