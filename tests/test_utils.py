"""Tests for the trackjax.utils angle helpers."""

import jax
import jax.numpy as jnp
import pytest

from trackjax.utils import normalize_angle, normalize_component

_PI = float(jnp.pi)


class TestNormalizeAngle:
    @pytest.mark.parametrize(
        "angle, expected",
        [
            (0.0, 0.0),
            (1.0, 1.0),
            (-1.0, -1.0),
            (_PI, _PI),
            (-_PI, _PI),
            (3.0 * _PI + 0.5, -_PI + 0.5),
            (-1.5 * _PI, 0.5 * _PI),
            (1.5 * _PI, -0.5 * _PI),
            (2.0 * _PI + 0.25, 0.25),
            (-4.0 * _PI - 0.25, -0.25),
        ],
    )
    def test_known_values(self, angle, expected):
        assert float(normalize_angle(angle)) == pytest.approx(expected, abs=1e-12)

    @pytest.mark.parametrize("angle", [-100.0, -7.0, -3.2, -_PI, 0.3, _PI, 3.2, 7.0, 100.0])
    def test_result_in_half_open_interval(self, angle):
        wrapped = float(normalize_angle(angle))
        assert -_PI < wrapped <= _PI

    def test_preserves_angle_modulo_two_pi(self):
        angles = jnp.linspace(-20.0, 20.0, 101)
        wrapped = normalize_angle(angles)
        k = (angles - wrapped) / (2.0 * jnp.pi)
        assert jnp.allclose(k, jnp.round(k), atol=1e-9)

    def test_idempotent(self):
        angles = jnp.linspace(-50.0, 50.0, 1001)
        once = normalize_angle(angles)
        twice = normalize_angle(once)
        assert jnp.array_equal(once, twice)

    def test_in_range_values_unchanged(self):
        angles = jnp.array([-3.14, -1.0, 0.0, 2.5, jnp.pi])
        assert jnp.array_equal(normalize_angle(angles), angles)

    def test_array_shape_preserved(self):
        angles = jnp.ones((3, 4)) * 7.0
        assert normalize_angle(angles).shape == (3, 4)

    def test_jit_compatible(self):
        wrapped = jax.jit(normalize_angle)(jnp.array([4.0, -4.0]))
        expected = normalize_angle(jnp.array([4.0, -4.0]))
        assert jnp.allclose(wrapped, expected, atol=1e-12)


class TestNormalizeComponent:
    def test_none_index_returns_input(self):
        v = jnp.array([10.0, -10.0, 7.0])
        assert jnp.array_equal(normalize_component(v, None), v)

    def test_only_selected_component_wrapped(self):
        v = jnp.array([10.0, 7.0, -10.0])
        result = normalize_component(v, 1)
        assert float(result[0]) == pytest.approx(10.0)
        assert float(result[1]) == pytest.approx(7.0 - 2.0 * _PI, abs=1e-12)
        assert float(result[2]) == pytest.approx(-10.0)

    def test_stack_of_vectors(self):
        v = jnp.array([[0.0, 4.0], [1.0, -4.0], [2.0, 0.5]])
        result = normalize_component(v, 1)
        assert result.shape == (3, 2)
        assert jnp.allclose(result[:, 0], v[:, 0])
        assert jnp.allclose(result[:, 1], normalize_angle(v[:, 1]))
