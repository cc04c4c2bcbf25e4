"""Range, bearing and range-rate (radar) measurement model.

The radar observes the object in polar coordinates centered on the
sensor:

.. math::

    \\rho = \\sqrt{p_x^2 + p_y^2}, \\quad
    \\varphi = \\operatorname{atan2}(p_y, p_x), \\quad
    \\dot\\rho = \\frac{p_x v \\cos\\psi + p_y v \\sin\\psi}{\\rho}

The range-rate divides by the range, which is undefined for an object at
the sensor origin.  The divisor is clamped to
:data:`~trackjax.constants.MIN_RANGE` so degenerate sigma points produce a
large but finite value instead of NaN.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from trackjax.config import get_dtype
from trackjax.constants import BEARING_INDEX, MIN_RANGE, STD_PHI, STD_RHO, STD_RHODOT
from trackjax.measurements._types import MeasurementModel


def radar_measurement(state: ArrayLike) -> Array:
    """Map a CTRV state vector into radar measurement space.

    Args:
        state: State vector ``[px, py, v, yaw, yaw_rate]`` of shape ``(5,)``.

    Returns:
        jax.Array: Measurement ``[rho, phi, rho_dot]`` of shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from trackjax.measurements import radar_measurement

        state = jnp.array([3.0, 4.0, 1.0, 0.0, 0.0])
        z = radar_measurement(state)  # [5.0, 0.9273, 0.6]
        ```
    """
    dtype = get_dtype()
    state = jnp.asarray(state, dtype=dtype)
    px, py, v, yaw = state[0], state[1], state[2], state[3]

    rho = jnp.sqrt(px * px + py * py)
    phi = jnp.arctan2(py, px)
    rho_safe = jnp.maximum(rho, MIN_RANGE)
    rho_dot = (px * v * jnp.cos(yaw) + py * v * jnp.sin(yaw)) / rho_safe

    return jnp.stack([rho, phi, rho_dot])


def radar_noise(
    std_rho: float = STD_RHO,
    std_phi: float = STD_PHI,
    std_rhodot: float = STD_RHODOT,
) -> Array:
    """Construct the measurement noise covariance of the radar.

    Args:
        std_rho: Range noise standard deviation [m].
        std_phi: Bearing noise standard deviation [rad].
        std_rhodot: Range-rate noise standard deviation [m/s].

    Returns:
        jax.Array: Diagonal covariance of shape ``(3, 3)``.
    """
    dtype = get_dtype()
    return jnp.diag(jnp.array([std_rho**2, std_phi**2, std_rhodot**2], dtype=dtype))


def radar_model(
    std_rho: float = STD_RHO,
    std_phi: float = STD_PHI,
    std_rhodot: float = STD_RHODOT,
) -> MeasurementModel:
    """Build the :class:`MeasurementModel` of the radar.

    The bearing (index 1) is flagged as angular so its residuals are
    wrapped into ``(-pi, pi]`` during the update.
    """
    return MeasurementModel(
        measurement_fn=radar_measurement,
        noise=radar_noise(std_rho, std_phi, std_rhodot),
        angle_index=BEARING_INDEX,
    )


def radar_to_cartesian(z: ArrayLike) -> Array:
    """Convert the range and bearing of a radar measurement to a position.

    Args:
        z: Radar measurement ``[rho, phi, ...]``. Only the first two
            components are used.

    Returns:
        jax.Array: Position ``[rho cos(phi), rho sin(phi)]``.
    """
    dtype = get_dtype()
    z = jnp.asarray(z, dtype=dtype)
    rho, phi = z[0], z[1]
    return jnp.stack([rho * jnp.cos(phi), rho * jnp.sin(phi)])
