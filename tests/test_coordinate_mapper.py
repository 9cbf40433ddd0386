"""Tests for coordinate normalization and tile quotas."""

import pytest
import numpy as np
from pydantic import ValidationError

from py_popmap.core import CoordinateMapper, InvalidLocationsError, Location, PopMapOptions
from py_popmap.core.coordinate_mapper import round_half_away


def loc(name, population, lat, lng):
    return Location(name=name, population=population, lat=lat, lng=lng)


class TestRounding:
    """Test round-half-away-from-zero."""

    def test_halves_round_away_from_zero(self):
        """Test rounding of halves and near-halves."""
        values = [0.5, 1.5, 2.5, -0.5, -1.5, 0.49, 2.51]
        expected = [1, 2, 3, -1, -2, 0, 3]
        np.testing.assert_array_equal(round_half_away(values), expected)


class TestQuotas:
    """Test tile quota computation and ordering."""

    def test_two_location_scenario(self):
        """100 vs 300 population splits the 1024 tile budget 256/768."""
        mapper = CoordinateMapper(20, 20)
        result = mapper.map_locations([
            loc("Large", 300, 10.0, 10.0),
            loc("Small", 100, 0.0, 0.0),
        ])

        assert [g.name for g in result] == ["Small", "Large"]
        assert [g.tile_quota for g in result] == [256, 768]

    def test_half_quota_rounds_up(self):
        """Quotas of exactly x.5 round away from zero."""
        mapper = CoordinateMapper(20, 20)
        result = mapper.map_locations([
            loc("Tiny", 1, 0.0, 0.0),
            loc("Huge", 2047, 1.0, 1.0),
        ])

        quotas = {g.name: g.tile_quota for g in result}
        assert quotas == {"Tiny": 1, "Huge": 1024}

    def test_ties_keep_input_order(self):
        """Test that equal quotas keep input order."""
        mapper = CoordinateMapper(20, 20)
        result = mapper.map_locations([
            loc("C", 10, 0.0, 0.0),
            loc("A", 10, 1.0, 1.0),
            loc("B", 10, 2.0, 2.0),
        ])

        assert [g.name for g in result] == ["C", "A", "B"]
        assert all(g.tile_quota == 341 for g in result)

    def test_custom_budget(self):
        """Test quotas against a non-default tile budget."""
        mapper = CoordinateMapper(20, 20, PopMapOptions(total_tiles=100))
        result = mapper.map_locations([
            loc("A", 1, 0.0, 0.0),
            loc("B", 3, 1.0, 1.0),
        ])
        assert [g.tile_quota for g in result] == [25, 75]

    def test_zero_population_location_gets_zero_quota(self):
        """Test that an empty location gets no quota."""
        mapper = CoordinateMapper(20, 20)
        result = mapper.map_locations([
            loc("Ghost", 0, 0.0, 0.0),
            loc("Town", 50, 1.0, 1.0),
        ])
        assert result[0].name == "Ghost"
        assert result[0].tile_quota == 0
        assert result[1].tile_quota == 1024


class TestCenters:
    """Test linear normalization of coordinates."""

    def test_extremes_map_to_buffer_edges(self):
        """Test that bounding box extremes land on the margin edges."""
        mapper = CoordinateMapper(20, 30)
        result = mapper.map_locations([
            loc("SW", 1, -10.0, 100.0),
            loc("NE", 1, 50.0, 120.0),
        ])
        centers = {g.name: (g.center_x, g.center_y) for g in result}

        assert centers["SW"] == (5, 5)
        assert centers["NE"] == (15, 25)

    def test_intermediate_values_round_half_away(self):
        """Test rounding of centres between the extremes."""
        mapper = CoordinateMapper(20, 20)
        result = mapper.map_locations([
            loc("A", 1, 0.0, 0.0),
            loc("B", 1, 1.0, 1.0),
            loc("C", 1, 4.0, 4.0),
        ])
        centers = {g.name: g.center_x for g in result}

        # 1/4 of a 10 cell span from the margin is 7.5
        assert centers == {"A": 5, "B": 8, "C": 15}

    def test_latitude_increases_along_y(self):
        """Test that latitude maps onto grid rows."""
        mapper = CoordinateMapper(20, 20)
        result = mapper.map_locations([
            loc("South", 1, -5.0, 0.0),
            loc("North", 1, 5.0, 1.0),
        ])
        centers = {g.name: g.center_y for g in result}
        assert centers["North"] > centers["South"]

    def test_single_location_centers_on_midpoint(self):
        """Test the single location fallback to the grid midpoint."""
        mapper = CoordinateMapper(20, 16)
        result = mapper.map_locations([loc("Only", 42, 12.3, 45.6)])

        assert (result[0].center_x, result[0].center_y) == (10, 8)
        assert result[0].tile_quota == 1024

    def test_colinear_axis_centers_on_midline(self):
        """Test the zero range fallback on one axis."""
        mapper = CoordinateMapper(20, 20)
        result = mapper.map_locations([
            loc("West", 1, 7.0, 0.0),
            loc("East", 1, 7.0, 10.0),
        ])
        centers = {g.name: (g.center_x, g.center_y) for g in result}

        assert centers == {"West": (5, 10), "East": (15, 10)}

    def test_small_grid_shrinks_margin(self):
        """Test margin shrinking on grids narrower than two margins."""
        mapper = CoordinateMapper(8, 8)
        result = mapper.map_locations([
            loc("A", 1, 0.0, 0.0),
            loc("B", 1, 10.0, 10.0),
        ])
        centers = {g.name: (g.center_x, g.center_y) for g in result}

        assert centers == {"A": (3, 3), "B": (5, 5)}

    def test_grid_of_exactly_two_margins_collapses_to_center(self):
        """Test that a grid twice the margin wide maps every location to its centre cell."""
        mapper = CoordinateMapper(10, 10)
        result = mapper.map_locations([
            loc("A", 1, 0.0, 0.0),
            loc("B", 1, 10.0, 10.0),
        ])
        centers = {g.name: (g.center_x, g.center_y) for g in result}

        assert centers == {"A": (5, 5), "B": (5, 5)}

    @pytest.mark.parametrize("width,height", [(1, 1), (2, 3), (10, 10), (40, 25)])
    def test_centers_always_on_grid(self, width, height):
        """Test that mapped centres are valid grid cells."""
        mapper = CoordinateMapper(width, height)
        locations = [loc(f"L{i}", i + 1, i * 3.7 - 20, 100 - i * 11.1) for i in range(12)]
        for g in mapper.map_locations(locations):
            assert 0 <= g.center_x < width
            assert 0 <= g.center_y < height


class TestInvalidInput:
    """Test rejection of unusable inputs."""

    def test_empty_list(self):
        """Test rejection of an empty location list."""
        with pytest.raises(InvalidLocationsError):
            CoordinateMapper(20, 20).map_locations([])

    def test_zero_total_population(self):
        """Test rejection of a zero total population."""
        with pytest.raises(InvalidLocationsError):
            CoordinateMapper(20, 20).map_locations([
                loc("A", 0, 0.0, 0.0),
                loc("B", 0, 1.0, 1.0),
            ])

    def test_invalid_locations_error_is_value_error(self):
        """Test that invalid input errors are ValueErrors."""
        with pytest.raises(ValueError):
            CoordinateMapper(20, 20).map_locations([])

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5)])
    def test_bad_grid_dimensions(self, width, height):
        """Test rejection of non-positive grid sizes."""
        with pytest.raises(ValueError):
            CoordinateMapper(width, height)

    def test_negative_population_rejected(self):
        """Test validation of negative populations."""
        with pytest.raises(ValidationError):
            loc("Bad", -1, 0.0, 0.0)

    def test_non_finite_coordinates_rejected(self):
        """Test validation of NaN and infinite coordinates."""
        with pytest.raises(ValidationError):
            loc("Bad", 1, float("nan"), 0.0)
        with pytest.raises(ValidationError):
            loc("Bad", 1, 0.0, float("inf"))

    def test_empty_name_rejected(self):
        """Test validation of empty names."""
        with pytest.raises(ValidationError):
            loc("", 1, 0.0, 0.0)
