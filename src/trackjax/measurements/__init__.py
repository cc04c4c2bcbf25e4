"""Sensor measurement models for the unscented tracker.

Provides measurement functions, noise covariance constructors and
ready-made :class:`MeasurementModel` values for the supported sensors.
Each sensor type is implemented in its own sub-module.

Available sensor models:

- :func:`position_measurement` -- direct-position measurement ``[px, py]``
- :func:`position_noise` -- direct-position noise covariance
- :func:`position_model` -- direct-position :class:`MeasurementModel`
- :func:`radar_measurement` -- range/bearing/range-rate measurement
- :func:`radar_noise` -- radar noise covariance
- :func:`radar_model` -- radar :class:`MeasurementModel`
- :func:`radar_to_cartesian` -- polar to Cartesian position conversion

All measurement models are compatible with ``ukf_update`` from
:mod:`trackjax.estimation`.
"""

from trackjax.measurements._types import MeasurementModel
from trackjax.measurements.position import (
    position_measurement,
    position_model,
    position_noise,
)
from trackjax.measurements.radar import (
    radar_measurement,
    radar_model,
    radar_noise,
    radar_to_cartesian,
)

__all__ = [
    "MeasurementModel",
    "position_measurement",
    "position_noise",
    "position_model",
    "radar_measurement",
    "radar_noise",
    "radar_model",
    "radar_to_cartesian",
]
