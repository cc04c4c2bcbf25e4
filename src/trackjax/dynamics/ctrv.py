"""Constant turn-rate and velocity (CTRV) motion model.

Propagates augmented sigma points ``[px, py, v, yaw, yaw_rate, nu_a,
nu_yawdd]`` forward in time.  The object moves on a circular arc with
constant speed and yaw rate; when the yaw rate is (almost) zero the arc
degenerates to a straight line.  The two trailing noise components are
the longitudinal and yaw accelerations acting over the step, and enter
the prediction through their second-order (position, yaw) and first-order
(speed, yaw rate) contributions.

Both branches are evaluated and selected with ``jnp.where``; the arc
branch divides by a guarded yaw rate so the unused branch can never inject
NaN into the result or its gradient.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from trackjax.config import get_dtype
from trackjax.constants import N_X, YAW_RATE_EPS


def ctrv_propagate(aug_state: ArrayLike, dt: ArrayLike) -> Array:
    """Propagate one augmented CTRV state over a time step.

    Args:
        aug_state: Augmented state of shape ``(7,)``:
            ``[px, py, v, yaw, yaw_rate, nu_a, nu_yawdd]``.
        dt: Elapsed time in seconds. Zero is allowed.

    Returns:
        jax.Array: Predicted state of shape ``(5,)``:
            ``[px, py, v, yaw, yaw_rate]``.

    Examples:
        ```python
        import jax.numpy as jnp
        from trackjax.dynamics import ctrv_propagate

        x_aug = jnp.array([0.0, 0.0, 2.0, 0.0, 0.0, 0.0, 0.0])
        ctrv_propagate(x_aug, 0.5)  # [1.0, 0.0, 2.0, 0.0, 0.0]
        ```
    """
    dtype = get_dtype()
    aug_state = jnp.asarray(aug_state, dtype=dtype)
    dt = jnp.asarray(dt, dtype=dtype)

    px, py, v, yaw, yawd, nu_a, nu_yawdd = (aug_state[i] for i in range(7))

    turning = jnp.abs(yawd) > YAW_RATE_EPS
    safe_yawd = jnp.where(turning, yawd, 1.0)
    yaw_end = yaw + yawd * dt

    px_arc = px + v / safe_yawd * (jnp.sin(yaw_end) - jnp.sin(yaw))
    py_arc = py + v / safe_yawd * (jnp.cos(yaw) - jnp.cos(yaw_end))
    px_line = px + v * dt * jnp.cos(yaw)
    py_line = py + v * dt * jnp.sin(yaw)

    px_p = jnp.where(turning, px_arc, px_line)
    py_p = jnp.where(turning, py_arc, py_line)

    # Process noise
    half_dt2 = 0.5 * dt * dt
    px_p = px_p + half_dt2 * nu_a * jnp.cos(yaw)
    py_p = py_p + half_dt2 * nu_a * jnp.sin(yaw)
    v_p = v + nu_a * dt
    yaw_p = yaw_end + half_dt2 * nu_yawdd
    yawd_p = yawd + nu_yawdd * dt

    return jnp.stack([px_p, py_p, v_p, yaw_p, yawd_p])


def ctrv_propagate_sigma_points(points: ArrayLike, dt: ArrayLike) -> Array:
    """Propagate a stack of augmented sigma points over a time step.

    Applies :func:`ctrv_propagate` to every row via ``jax.vmap``. The
    noise dimensions are dropped from the output.

    Args:
        points: Augmented sigma points of shape ``(k, 7)``.
        dt: Elapsed time in seconds, shared by all points.

    Returns:
        jax.Array: Predicted sigma points of shape ``(k, 5)``.
    """
    dtype = get_dtype()
    points = jnp.asarray(points, dtype=dtype)
    predicted = jax.vmap(ctrv_propagate, in_axes=(0, None))(points, dt)
    return predicted.reshape(points.shape[0], N_X)
