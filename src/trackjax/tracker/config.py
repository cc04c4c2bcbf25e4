"""Configuration dataclass for the CTRV unscented tracker.

:class:`TrackerConfig` selects which sensors are fused and holds the
process and measurement noise standard deviations.  The configuration is
fixed at construction; the sensor noise values are manufacturer-supplied
constants and the process noise values are the tuning knobs.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp
from jax import Array

from trackjax.config import get_dtype
from trackjax.constants import (
    STD_A,
    STD_PHI,
    STD_PX,
    STD_PY,
    STD_RHO,
    STD_RHODOT,
    STD_YAWDD,
)
from trackjax.measurements import MeasurementModel, position_model, radar_model
from trackjax.tracker._types import SensorType


@dataclass(frozen=True)
class TrackerConfig:
    """Configuration for the CTRV unscented tracker.

    Args:
        use_position: Fuse direct-position measurements after
            initialization.
        use_radar: Fuse radar measurements after initialization.
        std_a: Process noise standard deviation of the longitudinal
            acceleration [m/s^2].
        std_yawdd: Process noise standard deviation of the yaw
            acceleration [rad/s^2].
        std_px: Position sensor noise along x [m].
        std_py: Position sensor noise along y [m].
        std_rho: Radar range noise [m].
        std_phi: Radar bearing noise [rad].
        std_rhodot: Radar range-rate noise [m/s].

    Examples:
        ```python
        from trackjax.tracker import TrackerConfig
        config = TrackerConfig(use_radar=False, std_a=1.5)
        config.process_noise_std  # [1.5, 2.0]
        ```
    """

    # Sensor toggles
    use_position: bool = True
    use_radar: bool = True

    # Process noise
    std_a: float = STD_A
    std_yawdd: float = STD_YAWDD

    # Position sensor noise
    std_px: float = STD_PX
    std_py: float = STD_PY

    # Radar noise
    std_rho: float = STD_RHO
    std_phi: float = STD_PHI
    std_rhodot: float = STD_RHODOT

    def __post_init__(self) -> None:
        for name in ("std_a", "std_yawdd"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        for name in ("std_px", "std_py", "std_rho", "std_phi", "std_rhodot"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    @property
    def process_noise_std(self) -> Array:
        """Process noise standard deviations ``[std_a, std_yawdd]``."""
        return jnp.array([self.std_a, self.std_yawdd], dtype=get_dtype())

    def position_model(self) -> MeasurementModel:
        """Measurement model of the direct-position sensor."""
        return position_model(self.std_px, self.std_py)

    def radar_model(self) -> MeasurementModel:
        """Measurement model of the radar."""
        return radar_model(self.std_rho, self.std_phi, self.std_rhodot)

    def model_for(self, sensor_type: SensorType) -> MeasurementModel:
        """Return the measurement model of *sensor_type*.

        Raises:
            ValueError: If *sensor_type* is not a :class:`SensorType`.
        """
        if sensor_type == SensorType.POSITION:
            return self.position_model()
        if sensor_type == SensorType.RADAR:
            return self.radar_model()
        raise ValueError(f"Unsupported sensor type: {sensor_type!r}")

    def is_enabled(self, sensor_type: SensorType) -> bool:
        """Whether measurements of *sensor_type* are fused after initialization.

        Raises:
            ValueError: If *sensor_type* is not a :class:`SensorType`.
        """
        if sensor_type == SensorType.POSITION:
            return self.use_position
        if sensor_type == SensorType.RADAR:
            return self.use_radar
        raise ValueError(f"Unsupported sensor type: {sensor_type!r}")
