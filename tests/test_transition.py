"""Tests for transition planning, stepping and value colouring."""

import numpy as np
import pytest

from surfaceviz.model.colours import Colour, GradientTable
from surfaceviz.model.functions import FunctionTransform, SurfaceFunction
from surfaceviz.model.grid import SampleGrid, ValueRange
from surfaceviz.model.transition import (
    TransitionEngine, colour_keys_for, ramp_position, recolour, step_count_for_resolution, value_fraction
)


def single_sample_grid(z):
    grid = SampleGrid()
    grid.rebuild(0.0, 0.0, 0.0, 0.0, 1.0)
    grid.current_z = np.array([z], dtype=np.float64)
    return grid


def linear_grid():
    grid = SampleGrid()
    grid.rebuild(0.0, 4.0, 0.0, 0.0, 1.0)
    value_range = grid.resample_targets(FunctionTransform(), SurfaceFunction("x", lambda x, y: x + 0 * y))
    return grid, value_range


class TestStepCount:
    @pytest.mark.parametrize("resolution, expected", [
        (0.05, 3), (0.149, 3), (0.15, 100), (0.3, 100), (0.55, 100),
    ])
    def test_policy(self, resolution, expected):
        assert step_count_for_resolution(resolution) == expected


class TestValueFraction:
    def test_endpoints(self):
        value_range = ValueRange(-2.0, 4.0)
        assert value_fraction(4.0, value_range) == 0.0
        assert value_fraction(-2.0, value_range) == 1.0
        assert value_fraction(1.0, value_range) == pytest.approx(0.5)

    def test_clamped_outside_range(self):
        value_range = ValueRange(-2.0, 4.0)
        assert value_fraction(10.0, value_range) == 0.0
        assert value_fraction(-10.0, value_range) == 1.0

    def test_degenerate_range(self):
        assert value_fraction(3.0, ValueRange(3.0, 3.0)) == 0.0
        np.testing.assert_array_equal(value_fraction(np.array([1.0, 3.0]), ValueRange(3.0, 3.0)), [0.0, 0.0])

    def test_monotonic_in_value(self):
        values = np.linspace(-2.0, 4.0, 25)
        fractions = value_fraction(values, ValueRange(-2.0, 4.0))
        assert np.all(np.diff(fractions) <= 0)

    def test_ramp_position_is_value_fraction(self):
        value_range = ValueRange(0.0, 8.0)
        assert ramp_position(2.0, value_range) == value_fraction(2.0, value_range)


class TestColourKeys:
    def test_extremes_map_to_ramp_ends(self):
        keys = colour_keys_for(np.array([4.0, -2.0, 1.0]), ValueRange(-2.0, 4.0))
        assert list(keys) == ["0.00", "1.00", "0.50"]

    def test_no_range_uses_first_key(self):
        keys = colour_keys_for(np.array([1.0, 2.0]), None)
        assert list(keys) == [GradientTable.MIN_KEY] * 2

    def test_maximum_sample_gets_max_colour(self):
        table = GradientTable()
        table.build(Colour.from_hex("#00FF00"), Colour.from_hex("#FF0000"))
        grid, value_range = linear_grid()
        grid.current_z = grid.target_z.copy()
        recolour(grid, value_range)
        top = int(np.argmax(grid.current_z))
        assert table.colour(str(grid.colour_keys[top])) == Colour.from_hex("#FF0000")

    def test_recolour_is_idempotent(self):
        grid, value_range = linear_grid()
        grid.current_z = grid.target_z.copy()
        recolour(grid, value_range)
        first = grid.colour_keys.copy()
        recolour(grid, value_range)
        np.testing.assert_array_equal(grid.colour_keys, first)


class TestTransitionEngine:
    def test_plan_interval(self):
        grid, _ = linear_grid()
        plan = TransitionEngine().plan(grid, step_count=100)
        assert plan.interval == pytest.approx(0.02)
        assert plan.remaining_steps == 100

    def test_run_lands_exactly_on_targets(self):
        grid, value_range = linear_grid()
        grid.current_z = np.array([0.3, -1.7, 2.2, 9.1, 0.0])
        engine = TransitionEngine()
        plan = engine.plan(grid, step_count=7)
        engine.run(grid, plan, value_range)
        np.testing.assert_array_equal(grid.current_z, grid.target_z)
        assert plan.is_finished

    def test_equal_increments(self):
        grid, value_range = linear_grid()
        engine = TransitionEngine()
        plan = engine.plan(grid, step_count=4)
        engine.step(grid, plan, value_range)
        engine.step(grid, plan, value_range)
        np.testing.assert_allclose(grid.current_z, grid.target_z / 2)

    def test_step_after_finish_is_a_no_op(self):
        grid, value_range = linear_grid()
        engine = TransitionEngine()
        plan = engine.plan(grid, step_count=1)
        assert engine.step(grid, plan, value_range)
        before = grid.current_z.copy()
        assert engine.step(grid, plan, value_range)
        np.testing.assert_array_equal(grid.current_z, before)

    def test_step_recolours_from_current_values(self):
        grid, value_range = linear_grid()
        engine = TransitionEngine()
        plan = engine.plan(grid, step_count=2)
        engine.step(grid, plan, value_range)
        # Halfway the top sample is at 2.0, the middle of [0, 4]
        assert grid.colour_keys[-1] == "0.50"

    def test_step_without_recolour_keeps_keys(self):
        grid, value_range = linear_grid()
        engine = TransitionEngine()
        plan = engine.plan(grid, step_count=2, recolour=False)
        before = grid.colour_keys.copy()
        engine.step(grid, plan, value_range)
        np.testing.assert_array_equal(grid.colour_keys, before)

    def test_zoom_example(self):
        grid = single_sample_grid(10.0)
        engine = TransitionEngine()
        plan = engine.plan_zoom(grid, 1.0, 10.0, step_count=100)
        assert plan.delta_per_step[0] == pytest.approx(0.9)
        assert not plan.recolour
        engine.step(grid, plan)
        assert grid.current_z[0] == pytest.approx(10.9)
        engine.run(grid, plan)
        assert grid.current_z[0] == pytest.approx(100.0)

    def test_zoom_rejects_non_positive_factor(self):
        with pytest.raises(ValueError):
            TransitionEngine().plan_zoom(single_sample_grid(1.0), 0.0, 10.0)

    def test_rejects_zero_steps(self):
        grid, _ = linear_grid()
        with pytest.raises(ValueError):
            TransitionEngine().plan(grid, step_count=0)

    def test_plan_for_another_grid_is_rejected(self):
        grid, value_range = linear_grid()
        engine = TransitionEngine()
        plan = engine.plan(grid, step_count=3)
        grid.rebuild(0.0, 1.0, 0.0, 1.0, 0.5)
        with pytest.raises(ValueError):
            engine.step(grid, plan, value_range)
