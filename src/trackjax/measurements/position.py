"""Direct-position (lidar-like) measurement model.

The sensor observes the planar position ``[px, py]`` of the object
directly, so the measurement function is a linear projection onto the
first two state components.  Noise is not applied by the measurement
function; it enters the update through the fixed covariance built by
:func:`position_noise`.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from trackjax.config import get_dtype
from trackjax.constants import STD_PX, STD_PY
from trackjax.measurements._types import MeasurementModel


def position_measurement(state: ArrayLike) -> Array:
    """Extract the planar position from a CTRV state vector.

    Args:
        state: State vector ``[px, py, v, yaw, yaw_rate]`` of shape ``(5,)``.

    Returns:
        jax.Array: Position vector ``[px, py]`` of shape ``(2,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from trackjax.measurements import position_measurement

        state = jnp.array([1.0, 2.0, 5.0, 0.1, 0.0])
        z = position_measurement(state)  # [1.0, 2.0]
        ```
    """
    dtype = get_dtype()
    state = jnp.asarray(state, dtype=dtype)
    return state[:2]


def position_noise(std_px: float = STD_PX, std_py: float = STD_PY) -> Array:
    """Construct the measurement noise covariance of the position sensor.

    Args:
        std_px: Noise standard deviation along x [m].
        std_py: Noise standard deviation along y [m].

    Returns:
        jax.Array: Diagonal covariance ``diag(std_px**2, std_py**2)``.
    """
    dtype = get_dtype()
    return jnp.diag(jnp.array([std_px**2, std_py**2], dtype=dtype))


def position_model(std_px: float = STD_PX, std_py: float = STD_PY) -> MeasurementModel:
    """Build the :class:`MeasurementModel` of the position sensor.

    Args:
        std_px: Noise standard deviation along x [m].
        std_py: Noise standard deviation along y [m].

    Returns:
        MeasurementModel: Linear position model without angular components.
    """
    return MeasurementModel(
        measurement_fn=position_measurement,
        noise=position_noise(std_px, std_py),
        angle_index=None,
    )
