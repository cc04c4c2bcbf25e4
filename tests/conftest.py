import jax.numpy as jnp
import pytest

from trackjax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Run every test in float64 unless the test module overrides it.

    Worker processes started by pytest-xdist begin with the float32
    default, and the filter tolerances used in the tests assume float64.
    test_config.py installs its own autouse fixture that resets float32.
    """
    set_dtype(jnp.float64)
