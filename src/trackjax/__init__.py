"""
trackjax is a small single-object tracker fusing position and radar measurements with an
unscented Kalman filter over a CTRV motion model, implemented in JAX.
"""

from .constants import (
    N_X,
    N_AUG,
    N_SIGMA,
    LAMBDA,
    YAW_INDEX,
    BEARING_INDEX,
    STD_A,
    STD_YAWDD,
    STD_PX,
    STD_PY,
    STD_RHO,
    STD_PHI,
    STD_RHODOT,
)

from .config import set_dtype, get_dtype

from .utils import normalize_angle

from .estimation import (
    FilterState,
    FilterResult,
    Prediction,
    ukf_predict,
    ukf_update,
)

from .measurements import (
    MeasurementModel,
    position_model,
    radar_model,
)

from .tracker import (
    SensorType,
    Measurement,
    TrackState,
    StepStatus,
    StepResult,
    TrackerConfig,
    initialize_track,
    process_measurement,
    UnscentedTracker,
)

__all__ = [
    # Constants
    "N_X",
    "N_AUG",
    "N_SIGMA",
    "LAMBDA",
    "YAW_INDEX",
    "BEARING_INDEX",
    "STD_A",
    "STD_YAWDD",
    "STD_PX",
    "STD_PY",
    "STD_RHO",
    "STD_PHI",
    "STD_RHODOT",
    # Config
    "set_dtype",
    "get_dtype",
    # Utils
    "normalize_angle",
    # Estimation
    "FilterState",
    "FilterResult",
    "Prediction",
    "ukf_predict",
    "ukf_update",
    # Measurements
    "MeasurementModel",
    "position_model",
    "radar_model",
    # Tracker
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
