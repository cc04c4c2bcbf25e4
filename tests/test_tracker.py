"""Tests for the trackjax.tracker module.

Tests cover:
- TrackerConfig defaults, validation and model selection
- Track initialization from position and radar measurements
- The predict/update cycle and its step statuses
- Disabled sensors, numerical fault recovery and logging
- Covariance symmetry/PSD over a long alternating sensor sequence
- The stateful UnscentedTracker wrapper
"""

import logging

import jax
import jax.numpy as jnp
import pytest

import trackjax.tracker.tracker as tracker_module
from trackjax.constants import BEARING_INDEX, N_X
from trackjax.dynamics import ctrv_propagate
from trackjax.estimation import FilterState, covariance_is_valid, ukf_predict
from trackjax.measurements import radar_measurement
from trackjax.tracker import (
    Measurement,
    SensorType,
    StepResult,
    StepStatus,
    TrackerConfig,
    TrackState,
    UnscentedTracker,
    initialize_track,
    process_measurement,
)

# ──────────────────────────────────────────────
# Helper functions
# ──────────────────────────────────────────────


def _position(t, x, y):
    return Measurement(SensorType.POSITION, t, jnp.array([x, y]))


def _radar(t, rho, phi, rho_dot):
    return Measurement(SensorType.RADAR, t, jnp.array([rho, phi, rho_dot]))


def _simulated_measurements(n, dt_us=50_000, seed=0):
    """Alternating noisy position/radar readings along a gently turning path."""
    config = TrackerConfig()
    key = jax.random.PRNGKey(seed)
    truth = jnp.array([5.0, 2.0, 3.0, 0.3, 0.1])
    measurements = []
    for k in range(n):
        key, subkey = jax.random.split(key)
        if k % 2 == 0:
            noise = jax.random.normal(subkey, (2,)) * config.std_px
            measurements.append(Measurement(SensorType.POSITION, k * dt_us, truth[:2] + noise))
        else:
            noise = jax.random.normal(subkey, (3,)) * jnp.array(
                [config.std_rho, config.std_phi, config.std_rhodot]
            )
            measurements.append(
                Measurement(SensorType.RADAR, k * dt_us, radar_measurement(truth) + noise)
            )
        truth = ctrv_propagate(jnp.concatenate([truth, jnp.zeros(2)]), dt_us * 1e-6)
    return measurements


def _assert_symmetric_psd(P):
    scale = max(1.0, float(jnp.max(jnp.abs(jnp.diag(P)))))
    assert float(jnp.max(jnp.abs(P - P.T))) <= 1e-9 * scale
    assert float(jnp.min(jnp.linalg.eigvalsh(P))) >= -1e-8 * scale


# ──────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────


class TestTrackerConfig:
    def test_defaults(self):
        config = TrackerConfig()
        assert config.use_position is True
        assert config.use_radar is True
        assert config.std_a == pytest.approx(3.0)
        assert config.std_yawdd == pytest.approx(2.0)
        assert config.std_px == pytest.approx(0.15)
        assert config.std_py == pytest.approx(0.15)
        assert config.std_rho == pytest.approx(0.3)
        assert config.std_phi == pytest.approx(0.03)
        assert config.std_rhodot == pytest.approx(0.3)

    def test_process_noise_std(self):
        config = TrackerConfig(std_a=1.5, std_yawdd=0.5)
        assert jnp.allclose(config.process_noise_std, jnp.array([1.5, 0.5]))

    def test_frozen(self):
        config = TrackerConfig()
        with pytest.raises(AttributeError):
            config.std_a = 1.0

    def test_negative_process_noise_raises(self):
        with pytest.raises(ValueError, match="std_a must be non-negative"):
            TrackerConfig(std_a=-1.0)

    def test_zero_process_noise_allowed(self):
        config = TrackerConfig(std_a=0.0, std_yawdd=0.0)
        assert config.std_a == 0.0

    @pytest.mark.parametrize("name", ["std_px", "std_py", "std_rho", "std_phi", "std_rhodot"])
    def test_non_positive_sensor_noise_raises(self, name):
        with pytest.raises(ValueError, match=f"{name} must be positive"):
            TrackerConfig(**{name: 0.0})

    def test_model_for(self):
        config = TrackerConfig()
        assert config.model_for(SensorType.POSITION).dim == 2
        radar = config.model_for(SensorType.RADAR)
        assert radar.dim == 3
        assert radar.angle_index == BEARING_INDEX

    def test_model_noise_uses_config(self):
        config = TrackerConfig(std_px=0.5)
        assert float(config.position_model().noise[0, 0]) == pytest.approx(0.25)

    def test_is_enabled(self):
        config = TrackerConfig(use_radar=False)
        assert config.is_enabled(SensorType.POSITION)
        assert not config.is_enabled(SensorType.RADAR)

    def test_unsupported_sensor_raises(self):
        with pytest.raises(ValueError, match="Unsupported sensor type"):
            TrackerConfig().model_for("sonar")
        with pytest.raises(ValueError, match="Unsupported sensor type"):
            TrackerConfig().is_enabled("sonar")


# ──────────────────────────────────────────────
# Initialization
# ──────────────────────────────────────────────


class TestInitializeTrack:
    def test_empty_track(self):
        track = TrackState.empty()
        assert track.initialized is False
        assert track.filter_state.x.shape == (N_X,)
        assert track.filter_state.P.shape == (N_X, N_X)

    def test_from_position(self):
        config = TrackerConfig()
        track = initialize_track(_position(1_000, 1.0, 2.0), config)
        assert track.initialized is True
        assert track.timestamp == 1_000
        assert jnp.allclose(track.filter_state.x, jnp.array([1.0, 2.0, 0.0, 0.0, 0.0]))
        expected_P = jnp.diag(jnp.array([0.15**2, 0.15**2, 1.0, 1.0, 1.0]))
        assert jnp.allclose(track.filter_state.P, expected_P, atol=1e-15)

    def test_from_radar_on_axis(self):
        config = TrackerConfig()
        track = initialize_track(_radar(0, 5.0, 0.0, 0.0), config)
        assert jnp.allclose(track.filter_state.x[:2], jnp.array([5.0, 0.0]), atol=1e-12)
        expected_P = jnp.diag(jnp.array([0.3**2, 0.03**2, 0.3**2, 1.0, 1.0]))
        assert jnp.allclose(track.filter_state.P, expected_P, atol=1e-15)

    def test_from_radar_seeds_speed_and_heading(self):
        track = initialize_track(_radar(0, 2.0, float(jnp.pi / 2.0), 0.5), TrackerConfig())
        expected = jnp.array([0.0, 2.0, 0.5, jnp.pi / 2.0, 0.0])
        assert jnp.allclose(track.filter_state.x, expected, atol=1e-12)

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError, match="must have 2 values"):
            initialize_track(Measurement(SensorType.POSITION, 0, jnp.array([1.0, 2.0, 3.0])), TrackerConfig())
        with pytest.raises(ValueError, match="must have 3 values"):
            initialize_track(Measurement(SensorType.RADAR, 0, jnp.array([1.0, 2.0])), TrackerConfig())

    def test_unsupported_sensor_raises(self):
        with pytest.raises(ValueError, match="Unsupported sensor type"):
            initialize_track(Measurement("sonar", 0, jnp.array([1.0])), TrackerConfig())


# ──────────────────────────────────────────────
# Predict/update cycle
# ──────────────────────────────────────────────


class TestProcessMeasurement:
    def test_first_measurement_initializes(self):
        result = process_measurement(TrackState.empty(), _position(10, 1.0, 2.0), TrackerConfig())
        assert isinstance(result, StepResult)
        assert result.status == StepStatus.INITIALIZED
        assert result.prediction is None
        assert result.update is None
        assert result.track.timestamp == 10
        assert result.ok

    def test_disabled_sensor_still_initializes(self):
        config = TrackerConfig(use_position=False)
        result = process_measurement(TrackState.empty(), _position(0, 1.0, 2.0), config)
        assert result.status == StepStatus.INITIALIZED
        assert result.track.initialized

    def test_second_measurement_updates(self):
        config = TrackerConfig()
        first = process_measurement(TrackState.empty(), _position(0, 1.0, 2.0), config)
        second = process_measurement(first.track, _radar(50_000, 2.3, 1.1, 0.4), config)
        assert second.status == StepStatus.UPDATED
        assert second.track.timestamp == 50_000
        assert second.prediction is not None
        assert second.update is not None
        assert bool(second.update.valid)

    def test_prediction_uses_elapsed_seconds(self):
        config = TrackerConfig()
        first = process_measurement(TrackState.empty(), _position(1_000_000, 1.0, 2.0), config)
        second = process_measurement(first.track, _position(1_250_000, 1.1, 2.0), config)
        expected = ukf_predict(first.track.filter_state, 0.25, config.process_noise_std)
        assert jnp.allclose(second.prediction.state.P, expected.state.P, atol=1e-12)

    def test_update_reduces_trace(self):
        """An update never increases the trace of the covariance."""
        config = TrackerConfig()
        track = TrackState.empty()
        for measurement in _simulated_measurements(10):
            result = process_measurement(track, measurement, config)
            if result.status == StepStatus.UPDATED:
                trace_before = float(jnp.trace(result.prediction.state.P))
                trace_after = float(jnp.trace(result.track.filter_state.P))
                assert trace_after <= trace_before
            track = result.track

    def test_covariance_symmetric_psd_over_alternating_sequence(self):
        config = TrackerConfig()
        track = TrackState.empty()
        measurements = _simulated_measurements(40)
        sensors = set()
        for measurement in measurements:
            result = process_measurement(track, measurement, config)
            assert result.ok
            if result.prediction is not None:
                _assert_symmetric_psd(result.prediction.state.P)
            _assert_symmetric_psd(result.track.filter_state.P)
            sensors.add(measurement.sensor_type)
            track = result.track
        assert sensors == {SensorType.POSITION, SensorType.RADAR}
        assert track.timestamp == measurements[-1].timestamp

    def test_estimate_follows_object(self):
        config = TrackerConfig()
        track = TrackState.empty()
        measurements = _simulated_measurements(40)
        for measurement in measurements:
            track = process_measurement(track, measurement, config).track

        truth = jnp.array([5.0, 2.0, 3.0, 0.3, 0.1])
        for _ in range(len(measurements) - 1):
            truth = ctrv_propagate(jnp.concatenate([truth, jnp.zeros(2)]), 0.05)
        assert float(jnp.linalg.norm(track.filter_state.x[:2] - truth[:2])) < 1.0

    def test_same_timestamp_is_pure_update(self):
        config = TrackerConfig()
        first = process_measurement(TrackState.empty(), _position(0, 1.0, 2.0), config)
        second = process_measurement(first.track, _position(0, 1.0, 2.0), config)
        assert second.status == StepStatus.UPDATED
        assert jnp.allclose(second.prediction.state.x, first.track.filter_state.x, atol=1e-12)

    def test_fractional_timestamp_raises(self):
        config = TrackerConfig()
        with pytest.raises(ValueError, match="integer number of microseconds"):
            process_measurement(TrackState.empty(), _position(10.5, 1.0, 2.0), config)

        track = process_measurement(TrackState.empty(), _position(0, 1.0, 2.0), config).track
        with pytest.raises(ValueError, match="integer number of microseconds"):
            process_measurement(track, _position(50_000.25, 1.0, 2.0), config)

    def test_integral_float_timestamp_accepted(self):
        config = TrackerConfig()
        track = process_measurement(TrackState.empty(), _position(0, 1.0, 2.0), config).track
        result = process_measurement(track, _position(50_000.0, 1.0, 2.0), config)
        assert result.track.timestamp == 50_000
        assert isinstance(result.track.timestamp, int)


class TestDisabledSensor:
    def test_radar_disabled_predicts_only(self):
        config = TrackerConfig(use_radar=False)
        track = process_measurement(TrackState.empty(), _position(0, 1.0, 2.0), config).track

        timestamp = 0
        for k in range(1, 4):
            timestamp = k * 100_000
            result = process_measurement(track, _radar(timestamp, 2.3, 1.1, 0.4), config)
            expected = ukf_predict(track.filter_state, 0.1, config.process_noise_std)

            assert result.status == StepStatus.PREDICTED
            assert result.update is None
            assert result.track.timestamp == timestamp
            assert jnp.allclose(result.track.filter_state.x, expected.state.x, atol=1e-12)
            assert jnp.allclose(result.track.filter_state.P, expected.state.P, atol=1e-12)
            track = result.track

    def test_position_disabled_predicts_only(self):
        config = TrackerConfig(use_position=False)
        track = process_measurement(TrackState.empty(), _radar(0, 5.0, 0.1, 1.0), config).track
        result = process_measurement(track, _position(50_000, 5.0, 0.5), config)
        assert result.status == StepStatus.PREDICTED
        assert result.track.timestamp == 50_000


class TestFaultRecovery:
    def test_tiny_negative_eigenvalue_recovers(self, caplog):
        """A covariance inside the acceptance tolerance but not factorizable is repaired."""
        P = jnp.diag(jnp.array([0.1, 0.1, 1.0, 1.0, -1e-11]))
        assert bool(covariance_is_valid(P))
        track = TrackState(
            filter_state=FilterState(x=jnp.array([1.0, 2.0, 1.0, 0.0, 0.0]), P=P),
            timestamp=0,
            initialized=True,
        )
        config = TrackerConfig()

        results = []
        with caplog.at_level(logging.WARNING, logger="trackjax.tracker.tracker"):
            for k in range(1, 6):
                result = process_measurement(track, _position(k * 50_000, 1.0 + 0.05 * k, 2.0), config)
                results.append(result)
                track = result.track

        assert [r.status for r in results] == [StepStatus.UPDATED] * 5
        assert [r.covariance_repaired for r in results] == [True, False, False, False, False]
        assert track.timestamp == 250_000
        assert float(jnp.min(jnp.linalg.eigvalsh(track.filter_state.P))) > 0.0
        assert "repaired covariance" in caplog.text

    def test_negative_definite_covariance_repaired(self):
        bad = TrackState(
            filter_state=FilterState(x=jnp.zeros(N_X), P=-jnp.eye(N_X)),
            timestamp=0,
            initialized=True,
        )
        result = process_measurement(bad, _position(50_000, 0.0, 0.0), TrackerConfig())
        assert result.covariance_repaired
        assert result.status == StepStatus.UPDATED
        assert result.track.timestamp == 50_000

    def test_unrepairable_covariance_reinitializes(self, caplog):
        P = jnp.eye(N_X).at[2, 2].set(jnp.nan)
        bad = TrackState(
            filter_state=FilterState(x=jnp.zeros(N_X), P=P),
            timestamp=0,
            initialized=True,
        )
        with caplog.at_level(logging.WARNING, logger="trackjax.tracker.tracker"):
            result = process_measurement(bad, _position(50_000, 1.0, 2.0), TrackerConfig())

        assert result.status == StepStatus.PREDICT_FAULT
        assert not result.ok
        assert result.update is None
        assert result.track.initialized
        assert result.track.timestamp == 50_000
        assert jnp.allclose(result.track.filter_state.x, jnp.array([1.0, 2.0, 0.0, 0.0, 0.0]))
        assert bool(jnp.all(jnp.isfinite(result.track.filter_state.P)))
        assert "reinitializing" in caplog.text

        # The reinitialized track keeps running
        follow_up = process_measurement(result.track, _position(100_000, 1.0, 2.0), TrackerConfig())
        assert follow_up.status == StepStatus.UPDATED

    def test_update_fault_keeps_prediction(self, caplog, monkeypatch):
        real_update = tracker_module.ukf_update

        def failing_update(prediction, z, model):
            return real_update(prediction, z, model)._replace(valid=jnp.array(False))

        monkeypatch.setattr(tracker_module, "ukf_update", failing_update)

        config = TrackerConfig()
        track = process_measurement(TrackState.empty(), _position(0, 1.0, 2.0), config).track
        with caplog.at_level(logging.WARNING, logger="trackjax.tracker.tracker"):
            result = process_measurement(track, _position(50_000, 1.1, 2.0), config)

        assert result.status == StepStatus.UPDATE_FAULT
        assert not result.ok
        assert result.track.timestamp == 50_000
        assert jnp.allclose(result.track.filter_state.x, result.prediction.state.x)
        assert jnp.allclose(result.track.filter_state.P, result.prediction.state.P)
        assert "numerically invalid" in caplog.text


# ──────────────────────────────────────────────
# Stateful wrapper
# ──────────────────────────────────────────────


class TestUnscentedTracker:
    def test_uninitialized(self):
        tracker = UnscentedTracker()
        assert tracker.is_initialized is False
        with pytest.raises(RuntimeError, match="not been initialized"):
            _ = tracker.x
        with pytest.raises(RuntimeError, match="not been initialized"):
            _ = tracker.P

    def test_default_config(self):
        assert UnscentedTracker().config == TrackerConfig()

    def test_initialize_and_read(self):
        tracker = UnscentedTracker()
        result = tracker.process_measurement(_position(0, 1.0, 2.0))
        assert result.status == StepStatus.INITIALIZED
        assert tracker.is_initialized
        assert tracker.timestamp == 0
        assert jnp.allclose(tracker.x, jnp.array([1.0, 2.0, 0.0, 0.0, 0.0]))
        assert tracker.P.shape == (N_X, N_X)

    def test_matches_functional_core(self):
        config = TrackerConfig()
        tracker = UnscentedTracker(config)
        track = TrackState.empty()
        for measurement in _simulated_measurements(6):
            tracker.process_measurement(measurement)
            track = process_measurement(track, measurement, config).track
        assert tracker.state.timestamp == track.timestamp
        assert jnp.allclose(tracker.x, track.filter_state.x, atol=1e-12)
        assert jnp.allclose(tracker.P, track.filter_state.P, atol=1e-12)

    def test_reset(self):
        tracker = UnscentedTracker()
        tracker.process_measurement(_position(0, 1.0, 2.0))
        tracker.reset()
        assert tracker.is_initialized is False
        result = tracker.process_measurement(_radar(10, 5.0, 0.0, 0.0))
        assert result.status == StepStatus.INITIALIZED
        assert jnp.allclose(tracker.x[:2], jnp.array([5.0, 0.0]), atol=1e-12)
