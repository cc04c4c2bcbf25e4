"""Angle wrapping helpers.

Differences of two angles (heading residuals, bearing innovations) must be
brought back into ``(-pi, pi]`` before they are weighted or squared.  The
helpers here are JAX-traceable and use ``jnp.where`` instead of Python
loops so they can run inside ``jax.jit`` and ``jax.vmap``.
"""

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from trackjax.config import get_dtype


def normalize_angle(angle: ArrayLike) -> Array:
    """Wrap an angle (or array of angles) into ``(-pi, pi]``.

    Values already inside the interval are returned unchanged, which makes
    the operation exactly idempotent.

    Args:
        angle (ArrayLike): Angle in radians.

    Returns:
        Angle in radians in ``(-pi, pi]``.

    Examples:
        ```python
        from trackjax.utils import normalize_angle
        normalize_angle(3.5 * jnp.pi)  # -0.5 * pi
        normalize_angle(-jnp.pi)       # pi
        ```
    """
    angle = jnp.asarray(angle, dtype=get_dtype())
    pi = jnp.asarray(jnp.pi, dtype=angle.dtype)
    two_pi = 2.0 * pi

    wrapped = pi - jnp.mod(pi - angle, two_pi)
    # jnp.mod can round up to the divisor itself
    wrapped = jnp.where(wrapped <= -pi, wrapped + two_pi, wrapped)

    in_range = (angle > -pi) & (angle <= pi)
    return jnp.where(in_range, angle, wrapped)


def normalize_component(vector: ArrayLike, index: int | None) -> Array:
    """Normalize one angular component of a vector.

    Args:
        vector (ArrayLike): Vector of shape ``(n,)`` or a stack of vectors
            of shape ``(k, n)``.
        index (int | None): Index of the angular component. ``None`` returns
            the input unchanged.

    Returns:
        Copy with the ``index`` component of every vector wrapped into
        ``(-pi, pi]``.
    """
    vector = jnp.asarray(vector, dtype=get_dtype())
    if index is None:
        return vector
    return vector.at[..., index].set(normalize_angle(vector[..., index]))
