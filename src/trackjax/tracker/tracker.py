"""Single-object CTRV tracker built on the augmented UKF.

The tracker is a two-state machine.  The first measurement of either
sensor initializes the track directly from the reading; every later
measurement runs a prediction over the elapsed time followed, if the
sensor is enabled, by a measurement update.

:func:`initialize_track` and :func:`process_measurement` are pure
functions of an explicit :class:`~trackjax.tracker.TrackState`.
:class:`UnscentedTracker` is a thin stateful wrapper owning one track for
callers that prefer an object.

Numerical faults reported by the filter are recovered here.  A failed
prediction is retried once with the covariance repaired; if that also
fails the track is reinitialized from the measurement.  A failed update
keeps the predicted state.  Accepted covariances are repaired before
they are stored so the next prediction can factorize them.  Faults are
logged and reported through :class:`~trackjax.tracker.StepStatus`.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
from jax import Array

from trackjax.config import get_dtype
from trackjax.constants import US2S
from trackjax.estimation import (
    FilterState,
    covariance_is_valid,
    repair_covariance,
    ukf_predict,
    ukf_update,
)
from trackjax.measurements import radar_to_cartesian
from trackjax.tracker._types import (
    Measurement,
    SensorType,
    StepResult,
    StepStatus,
    TrackState,
)
from trackjax.tracker.config import TrackerConfig

logger = logging.getLogger(__name__)

_MEASUREMENT_DIM = {SensorType.POSITION: 2, SensorType.RADAR: 3}


def _measurement_values(measurement: Measurement) -> Array:
    """Validate the sensor type and length of a measurement."""
    if measurement.sensor_type not in _MEASUREMENT_DIM:
        raise ValueError(f"Unsupported sensor type: {measurement.sensor_type!r}")
    values = jnp.asarray(measurement.values, dtype=get_dtype()).reshape(-1)
    expected = _MEASUREMENT_DIM[measurement.sensor_type]
    if values.shape[0] != expected:
        raise ValueError(
            f"{measurement.sensor_type.value} measurement must have {expected} values, "
            f"got {values.shape[0]}"
        )
    return values


def _measurement_timestamp(measurement: Measurement) -> int:
    """Return the timestamp as an int, rejecting fractional microseconds."""
    timestamp = measurement.timestamp
    if int(timestamp) != timestamp:
        raise ValueError(f"Timestamp must be an integer number of microseconds, got {timestamp!r}")
    return int(timestamp)


def initialize_track(measurement: Measurement, config: TrackerConfig) -> TrackState:
    """Create a track from its first measurement.

    - Position sensor: ``x = [px, py, 0, 0, 0]`` and
      ``P = diag(std_px^2, std_py^2, 1, 1, 1)``.
    - Radar: the range and bearing are converted to a position, the
      range-rate seeds the speed and the bearing seeds the heading:
      ``x = [rho cos(phi), rho sin(phi), rho_dot, phi, 0]`` and
      ``P = diag(std_rho^2, std_phi^2, std_rhodot^2, 1, 1)``.

    The speed and heading seeded from a single radar reading are only a
    starting point; they are refined by later updates.

    Args:
        measurement: First measurement of the track.
        config: Tracker configuration providing the sensor noise.

    Returns:
        TrackState: Initialized track stamped with the measurement time.

    Raises:
        ValueError: If the measurement has an unsupported sensor type,
            the wrong number of values or a fractional timestamp.
    """
    dtype = get_dtype()
    z = _measurement_values(measurement)

    if measurement.sensor_type == SensorType.POSITION:
        x = jnp.array([z[0], z[1], 0.0, 0.0, 0.0], dtype=dtype)
        variances = [config.std_px**2, config.std_py**2, 1.0, 1.0, 1.0]
    else:
        position = radar_to_cartesian(z)
        x = jnp.array([position[0], position[1], z[2], z[1], 0.0], dtype=dtype)
        variances = [config.std_rho**2, config.std_phi**2, config.std_rhodot**2, 1.0, 1.0]

    P = jnp.diag(jnp.array(variances, dtype=dtype))

    return TrackState(
        filter_state=FilterState(x=x, P=P),
        timestamp=_measurement_timestamp(measurement),
        initialized=True,
    )


def process_measurement(
    track: TrackState,
    measurement: Measurement,
    config: TrackerConfig,
) -> StepResult:
    """Advance a track with one measurement.

    Measurements must arrive in non-decreasing timestamp order; this is
    not checked.

    Args:
        track: Current track state.
        measurement: Next measurement.
        config: Tracker configuration.

    Returns:
        StepResult: The new track, the step status and the intermediate
            prediction and update results.

    Raises:
        ValueError: If the measurement has an unsupported sensor type,
            the wrong number of values or a fractional timestamp.

    Examples:
        ```python
        from trackjax.tracker import (
            Measurement, SensorType, TrackState, TrackerConfig, process_measurement,
        )

        config = TrackerConfig()
        track = TrackState.empty()
        step = process_measurement(track, Measurement(SensorType.POSITION, 0, [1.0, 2.0]), config)
        step = process_measurement(step.track, Measurement(SensorType.RADAR, 50_000, [2.3, 1.1, 0.4]), config)
        step.status  # StepStatus.UPDATED
        ```
    """
    if not track.initialized:
        new_track = initialize_track(measurement, config)
        logger.debug(
            "Initialized track from %s measurement at t=%d us",
            measurement.sensor_type.value,
            new_track.timestamp,
        )
        return StepResult(track=new_track, status=StepStatus.INITIALIZED)

    z = _measurement_values(measurement)
    timestamp = _measurement_timestamp(measurement)
    dt = (timestamp - track.timestamp) * US2S

    repaired = False
    prediction = ukf_predict(track.filter_state, dt, config.process_noise_std)
    if not bool(prediction.valid):
        repaired_state = track.filter_state._replace(P=repair_covariance(track.filter_state.P))
        prediction = ukf_predict(repaired_state, dt, config.process_noise_std)
        if not bool(prediction.valid):
            logger.warning(
                "Prediction over dt=%.6f s failed and the covariance could not be "
                "repaired; reinitializing track from %s measurement at t=%d us",
                dt,
                measurement.sensor_type.value,
                timestamp,
            )
            return StepResult(
                track=initialize_track(measurement, config),
                status=StepStatus.PREDICT_FAULT,
                prediction=prediction,
            )
        logger.warning(
            "Prediction over dt=%.6f s failed (augmented covariance not positive "
            "definite); retried with repaired covariance",
            dt,
        )
        repaired = True

    predicted_track = TrackState(
        filter_state=prediction.state,
        timestamp=timestamp,
        initialized=True,
    )

    if not config.is_enabled(measurement.sensor_type):
        logger.debug(
            "Sensor %s disabled; prediction only at t=%d us",
            measurement.sensor_type.value,
            timestamp,
        )
        return StepResult(
            track=predicted_track,
            status=StepStatus.PREDICTED,
            prediction=prediction,
            covariance_repaired=repaired,
        )

    update = ukf_update(prediction, z, config.model_for(measurement.sensor_type))
    if not (bool(update.valid) and bool(covariance_is_valid(update.state.P))):
        logger.warning(
            "%s update at t=%d us is numerically invalid; keeping predicted state",
            measurement.sensor_type.value,
            timestamp,
        )
        return StepResult(
            track=predicted_track,
            status=StepStatus.UPDATE_FAULT,
            prediction=prediction,
            update=update,
            covariance_repaired=repaired,
        )

    logger.debug(
        "%s update at t=%d us (dt=%.6f s, NIS=%.3f)",
        measurement.sensor_type.value,
        timestamp,
        dt,
        float(update.nis),
    )
    # Round-off within tolerance is clipped so the next Cholesky succeeds
    updated_state = update.state._replace(P=repair_covariance(update.state.P))
    updated_track = TrackState(filter_state=updated_state, timestamp=timestamp, initialized=True)
    return StepResult(
        track=updated_track,
        status=StepStatus.UPDATED,
        prediction=prediction,
        update=update,
        covariance_repaired=repaired,
    )


class UnscentedTracker:
    """Stateful CTRV unscented tracker for one object.

    Owns a single :class:`TrackState` and replaces it on every call to
    :meth:`process_measurement`. There is no internal locking; callers
    driving one instance from several threads must serialize the calls.

    Args:
        config: Tracker configuration. Default: ``TrackerConfig()``.

    Examples:
        ```python
        from trackjax.tracker import Measurement, SensorType, UnscentedTracker

        tracker = UnscentedTracker()
        tracker.process_measurement(Measurement(SensorType.POSITION, 0, [1.0, 2.0]))
        tracker.x  # [1.0, 2.0, 0.0, 0.0, 0.0]
        ```
    """

    def __init__(self, config: TrackerConfig | None = None):
        self.config = config if config is not None else TrackerConfig()
        self._track = TrackState.empty()

    @property
    def state(self) -> TrackState:
        """The current track state, initialized or not."""
        return self._track

    @property
    def is_initialized(self) -> bool:
        """Whether the first measurement has been processed."""
        return self._track.initialized

    @property
    def timestamp(self) -> int:
        """Timestamp of the last processed measurement in microseconds."""
        return self._track.timestamp

    @property
    def x(self) -> Array:
        """State estimate ``[px, py, v, yaw, yaw_rate]``.

        Raises:
            RuntimeError: If no measurement has been processed yet.
        """
        self._require_initialized()
        return self._track.filter_state.x

    @property
    def P(self) -> Array:
        """State covariance of shape ``(5, 5)``.

        Raises:
            RuntimeError: If no measurement has been processed yet.
        """
        self._require_initialized()
        return self._track.filter_state.P

    def process_measurement(self, measurement: Measurement) -> StepResult:
        """Process one measurement and store the resulting track.

        Args:
            measurement: Next measurement, in non-decreasing time order.

        Returns:
            StepResult: Outcome of the step.
        """
        result = process_measurement(self._track, measurement, self.config)
        self._track = result.track
        return result

    def reset(self) -> None:
        """Drop the track; the next measurement initializes a new one."""
        self._track = TrackState.empty()

    def _require_initialized(self) -> None:
        if not self._track.initialized:
            raise RuntimeError("Tracker has not been initialized; process a measurement first")
