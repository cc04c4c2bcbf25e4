"""Motion models for the unscented tracker.

Available models:

- :func:`ctrv_propagate` -- CTRV propagation of one augmented state
- :func:`ctrv_propagate_sigma_points` -- CTRV propagation of a sigma point stack

Both are compatible with ``jax.jit`` and ``jax.vmap``.
"""

from trackjax.dynamics.ctrv import ctrv_propagate, ctrv_propagate_sigma_points

__all__ = [
    "ctrv_propagate",
    "ctrv_propagate_sigma_points",
]
