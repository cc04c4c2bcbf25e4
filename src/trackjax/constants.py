"""
The `constants` module defines the fixed dimensions, thresholds and default sensor noise
values of the CTRV unscented tracker.
"""

# Filter dimensions
"""
Dimension of the CTRV state vector ``[px, py, v, yaw, yaw_rate]``.
"""
N_X = 5

"""
Dimension of the augmented state (state plus longitudinal and yaw acceleration noise).
"""
N_AUG = 7

"""
Number of sigma points generated from the augmented state. Equal to ``2 * N_AUG + 1``.
"""
N_SIGMA = 2 * N_AUG + 1

"""
Sigma point spreading parameter. Equal to ``3 - N_AUG``.
"""
LAMBDA = 3 - N_AUG

# State layout
"""
Index of the heading (yaw) angle in the state vector.
"""
YAW_INDEX = 3

"""
Index of the bearing angle in a radar measurement vector ``[rho, phi, rho_dot]``.
"""
BEARING_INDEX = 1

# Numerical thresholds
"""
Yaw rates with magnitude at or below this value are propagated on a straight line. Units: *rad/s*
"""
YAW_RATE_EPS = 1e-3

"""
Lower bound on the range used as a divisor in the radar range-rate model. Units: *m*
"""
MIN_RANGE = 1e-4

"""
Conversion from measurement timestamps to seconds. Units: *s/us*
"""
US2S = 1e-6

# Process noise defaults
"""
Default process noise standard deviation of the longitudinal acceleration. Units: *m/s^2*
"""
STD_A = 3.0

"""
Default process noise standard deviation of the yaw acceleration. Units: *rad/s^2*
"""
STD_YAWDD = 2.0

# Sensor noise (manufacturer supplied)
"""
Position sensor noise standard deviation along x. Units: *m*
"""
STD_PX = 0.15

"""
Position sensor noise standard deviation along y. Units: *m*
"""
STD_PY = 0.15

"""
Radar range noise standard deviation. Units: *m*
"""
STD_RHO = 0.3

"""
Radar bearing noise standard deviation. Units: *rad*
"""
STD_PHI = 0.03

"""
Radar range-rate noise standard deviation. Units: *m/s*
"""
STD_RHODOT = 0.3
