"""Single-object tracking with the CTRV unscented Kalman filter.

Fuses direct-position and radar (range, bearing, range-rate) readings
into one state estimate ``[px, py, v, yaw, yaw_rate]``.

Available components:

- :class:`SensorType` -- Supported sensors
- :class:`Measurement` -- Timestamped sensor reading
- :class:`TrackState` -- Persistent track state
- :class:`StepStatus` -- Outcome of one step
- :class:`StepResult` -- Step output with diagnostics
- :class:`TrackerConfig` -- Sensor toggles and noise configuration
- :func:`initialize_track` -- Track initialization from a first reading
- :func:`process_measurement` -- Predict/update cycle for one reading
- :class:`UnscentedTracker` -- Stateful wrapper around one track
"""

from trackjax.tracker._types import (
    Measurement,
    SensorType,
    StepResult,
    StepStatus,
    TrackState,
)
from trackjax.tracker.config import TrackerConfig
from trackjax.tracker.tracker import UnscentedTracker, initialize_track, process_measurement

__all__ = [
    "SensorType",
    "Measurement",
    "TrackState",
    "StepStatus",
    "StepResult",
    "TrackerConfig",
    "initialize_track",
    "process_measurement",
    "UnscentedTracker",
]
