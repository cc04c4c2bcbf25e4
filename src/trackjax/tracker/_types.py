"""Type definitions for the single-object tracker.

Provides the values exchanged with callers of the tracker:

- :class:`SensorType`: The two supported sensors.
- :class:`Measurement`: One timestamped sensor reading.
- :class:`TrackState`: The persistent filter state owned by a track.
- :class:`StepStatus`: Outcome of processing one measurement.
- :class:`StepResult`: Updated track plus the intermediate results of
  the step that produced it.
"""

from __future__ import annotations

import enum
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from trackjax.config import get_dtype
from trackjax.constants import N_X
from trackjax.estimation._types import FilterResult, FilterState, Prediction


class SensorType(enum.Enum):
    """Sensor that produced a measurement."""

    POSITION = "position"
    RADAR = "radar"


class Measurement(NamedTuple):
    """A single sensor reading.

    Attributes:
        sensor_type: Sensor that produced the reading.
        timestamp: Acquisition time in microseconds.
        values: Raw values. ``[px, py]`` for :attr:`SensorType.POSITION`,
            ``[rho, phi, rho_dot]`` for :attr:`SensorType.RADAR`.
    """

    sensor_type: SensorType
    timestamp: int
    values: Array


class TrackState(NamedTuple):
    """Persistent state of one tracked object.

    Passed explicitly to and returned from every tracker step; nothing is
    mutated in place.

    Attributes:
        filter_state: State estimate ``[px, py, v, yaw, yaw_rate]`` and its
            covariance. Meaningless while ``initialized`` is ``False``.
        timestamp: Time of the last processed measurement in microseconds.
        initialized: Whether the first measurement has been received.
    """

    filter_state: FilterState
    timestamp: int
    initialized: bool

    @staticmethod
    def empty() -> TrackState:
        """Return an uninitialized track with zero mean and covariance.

        Returns:
            TrackState: Track waiting for its first measurement.
        """
        dtype = get_dtype()
        return TrackState(
            filter_state=FilterState(
                x=jnp.zeros(N_X, dtype=dtype),
                P=jnp.zeros((N_X, N_X), dtype=dtype),
            ),
            timestamp=0,
            initialized=False,
        )


class StepStatus(enum.Enum):
    """Outcome of processing one measurement."""

    INITIALIZED = "initialized"
    """The measurement initialized the track."""

    UPDATED = "updated"
    """Prediction and measurement update both ran."""

    PREDICTED = "predicted"
    """The sensor is disabled; only the prediction ran."""

    PREDICT_FAULT = "predict_fault"
    """Sigma point generation failed even after repairing the covariance;
    the track was reinitialized from the measurement."""

    UPDATE_FAULT = "update_fault"
    """The update was numerically invalid; the predicted state was kept."""


class StepResult(NamedTuple):
    """Result of processing one measurement.

    Attributes:
        track: Track state after the step.
        status: What the step did.
        prediction: Prediction computed during the step, or ``None`` for
            the initializing measurement.
        update: Measurement update computed during the step, or ``None``
            if no update ran.
        covariance_repaired: Whether the stored covariance had to be
            repaired before the prediction could run.
    """

    track: TrackState
    status: StepStatus
    prediction: Prediction | None = None
    update: FilterResult | None = None
    covariance_repaired: bool = False

    @property
    def ok(self) -> bool:
        """``True`` unless the step reported a numerical fault."""
        return self.status not in (StepStatus.PREDICT_FAULT, StepStatus.UPDATE_FAULT)
