"""Tests for the colour ramp."""

import numpy as np
import pytest

from surfaceviz.model.colours import Colour, GradientTable

BLACK = Colour(0.0, 0.0, 0.0)
WHITE = Colour(1.0, 1.0, 1.0)
RED = Colour(1.0, 0.0, 0.0)
BLUE = Colour(0.0, 0.0, 1.0)


@pytest.fixture
def table():
    t = GradientTable()
    t.build(min_colour=BLUE, max_colour=RED)
    return t


class TestColour:
    def test_from_hex(self):
        c = Colour.from_hex("#FF4500")
        assert c.as_tuple() == pytest.approx((1.0, 69 / 255, 0.0))

    def test_from_hex_without_hash(self):
        assert Colour.from_hex("7CFC00") == Colour.from_hex("#7CFC00")

    def test_hex_round_trip(self):
        assert Colour.from_hex("#7CFC00").to_hex() == "#7CFC00"

    def test_invalid_hex_raises(self):
        with pytest.raises(ValueError):
            Colour.from_hex("#FFF")

    def test_interpolate_endpoints_and_midpoint(self):
        assert BLACK.interpolate(WHITE, 0.0) == BLACK
        assert BLACK.interpolate(WHITE, 1.0).as_tuple() == pytest.approx((1.0, 1.0, 1.0))
        assert BLACK.interpolate(WHITE, 0.25).as_tuple() == pytest.approx((0.25, 0.25, 0.25))


class TestGradientTable:
    def test_has_101_two_decimal_keys(self, table):
        expected = [f"{i / 100:.2f}" for i in range(101)]
        assert len(table) == 101
        assert table.keys() == expected

    def test_zero_position_is_max_colour(self, table):
        assert table.colour("0.00") == RED

    def test_one_position_is_min_colour(self, table):
        assert table.colour("1.00").as_tuple() == pytest.approx(BLUE.as_tuple())

    def test_middle_entry_is_linear_mix(self, table):
        assert table.colour("0.50").as_tuple() == pytest.approx((0.5, 0.0, 0.5))

    def test_lookup_rounds_to_two_decimals(self, table):
        assert table.lookup(0.254).key == "0.25"
        assert table.lookup(0.256).key == "0.26"

    def test_lookup_clamps_out_of_range(self, table):
        assert table.lookup(-3.0).key == "0.00"
        assert table.lookup(7.5).key == "1.00"

    def test_unknown_key_falls_back_to_zero_entry(self, table):
        assert table.entry("nan") is table.entry("0.00")

    def test_unbuilt_table_raises(self):
        with pytest.raises(KeyError):
            GradientTable().lookup(0.5)

    def test_refresh_keeps_keys_and_entry_objects(self, table):
        before = {key: table.entry(key) for key in table.keys()}
        table.refresh(min_colour=WHITE, max_colour=BLACK)

        assert table.keys() == list(before.keys())
        for key, entry in before.items():
            assert table.entry(key) is entry
        assert table.colour("0.00") == BLACK
        assert table.colour("1.00").as_tuple() == pytest.approx((1.0, 1.0, 1.0))

    def test_refresh_with_same_endpoints_is_stable(self, table):
        first = table.colour("0.00")
        for _ in range(3):
            table.refresh(min_colour=BLUE, max_colour=RED)
        assert table.colour("0.00") == first

    def test_shared_entry_observes_refresh(self, table):
        shared = table.entry(GradientTable.MAX_KEY)
        table.refresh(min_colour=WHITE, max_colour=BLACK)
        assert shared.colour.as_tuple() == pytest.approx((1.0, 1.0, 1.0))

    def test_subscribers_are_notified(self, table):
        seen = []
        table.subscribe(seen.append)
        table.refresh(min_colour=WHITE, max_colour=BLACK)
        table.unsubscribe(seen.append)
        table.refresh(min_colour=BLUE, max_colour=RED)
        assert seen == [table]

    def test_build_twice_refreshes_in_place(self, table):
        entry = table.entry("0.30")
        table.build(min_colour=WHITE, max_colour=BLACK)
        assert table.entry("0.30") is entry
        assert len(table) == 101


class TestVectorisedKeys:
    def test_keys_for_matches_scalar_keys(self):
        positions = np.array([-0.5, 0.0, 0.123, 0.5, 0.999, 2.0])
        keys = GradientTable.keys_for(positions)
        assert list(keys) == [GradientTable.key_for(p) for p in positions]

    def test_negative_zero_is_zero_key(self):
        assert GradientTable.keys_for(np.array([-0.0]))[0] == "0.00"
        assert GradientTable.key_for(-0.0) == "0.00"

    @pytest.mark.parametrize("position, key", [(0.125, "0.13"), (0.375, "0.38"), (0.625, "0.63"), (0.005, "0.01")])
    def test_ties_round_half_up(self, position, key):
        assert GradientTable.key_for(position) == key
        assert GradientTable.keys_for(np.array([position]))[0] == key

    def test_nan_uses_first_key(self):
        assert GradientTable.key_for(float("nan")) == "0.00"
        assert list(GradientTable.keys_for(np.array([np.nan, 1.0]))) == ["0.00", "1.00"]

    def test_rgb_array(self, table):
        rgb = table.rgb_array(np.array(["0.00", "1.00", "0.00"]))
        assert rgb.shape == (3, 3)
        np.testing.assert_allclose(rgb[0], RED.as_tuple())
        np.testing.assert_allclose(rgb[1], BLUE.as_tuple(), atol=1e-12)
        np.testing.assert_allclose(rgb[2], RED.as_tuple())

    def test_rgb_array_empty(self, table):
        assert table.rgb_array(np.array([], dtype="<U5")).shape == (0, 3)
