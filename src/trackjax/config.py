"""Module-wide floating-point precision configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
by every filter in trackjax.  The default is ``jnp.float32`` for GPU/TPU
compatibility.  Switching to ``jnp.float64`` automatically enables
JAX's 64-bit mode (``jax_enable_x64``).

The unscented transform used here carries a negative center weight, so
long-running trackers are noticeably better behaved in ``float64``.

The dtype also sets the jitter added before the Cholesky factorization,
the floor used when repairing a covariance and the tolerance of
:func:`get_covariance_tolerance`.  Set it before wrapping ``ukf_predict``
or ``ukf_update`` in ``jax.jit``: a compiled filter keeps the dtype it
was traced with.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_dtype = jnp.float32


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for trackjax.

    Every filter function casts its inputs to this dtype.  Choosing
    ``jnp.float64`` also turns on ``jax_enable_x64``, without which JAX
    would silently downcast the arrays back to float32.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float32``).
    """
    return _dtype


def get_covariance_tolerance() -> float:
    """Return the dtype-adaptive tolerance for covariance health checks.

    Used when testing a covariance matrix for symmetry and for negative
    eigenvalues.  The tolerance is relative to the largest diagonal entry
    of the matrix under test:

    - ``float64``:  1e-9
    - ``float32``:  1e-4
    - ``float16``:  1e-2
    - ``bfloat16``: 1e-2

    Returns:
        float: Relative tolerance.
    """
    if _dtype == jnp.float64:
        return 1e-9
    if _dtype == jnp.float32:
        return 1e-4
    # float16 and bfloat16
    return 1e-2
