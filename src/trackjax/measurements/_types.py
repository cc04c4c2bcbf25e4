"""Measurement model capability shared by all sensors.

A :class:`MeasurementModel` bundles everything the unscented update needs
to know about a sensor: the transform from state space to measurement
space, the fixed measurement noise covariance, and which measurement
component (if any) is an angle that must be wrapped.  The update engine
consumes this value and never branches on sensor type.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from jax import Array


@dataclass(frozen=True)
class MeasurementModel:
    """Sensor description consumed by ``ukf_update``.

    Args:
        measurement_fn: Measurement model ``h(x) -> z_pred`` mapping a state
            vector of shape ``(5,)`` to a measurement of shape ``(m,)``.
            Applied to each sigma point via ``jax.vmap``.
        noise: Measurement noise covariance ``R`` of shape ``(m, m)``.
        angle_index: Index of the angular measurement component, or
            ``None`` if the measurement has no angle.
    """

    measurement_fn: Callable[[Array], Array]
    noise: Array
    angle_index: int | None = None

    @property
    def dim(self) -> int:
        """Measurement dimension ``m``."""
        return self.noise.shape[0]
