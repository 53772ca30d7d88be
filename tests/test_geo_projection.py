"""
Tests for the map projection
"""
import math

import pytest

from ecovision.core.exceptions import InvalidCoordinate
from ecovision.core.geo_utils import GeoProjection, Location, validate_coordinate


class TestGeoProjection:
    """Test suite for the equirectangular local-plane projection."""

    def setup_method(self):
        """Setup test fixtures."""
        self.projection = GeoProjection(
            center_lat=-12.0464, center_lng=-77.0428, scale=2000, origin_x=0, origin_y=0
        )

    def test_center_projects_to_origin(self):
        """Test the reference point lands on the origin."""
        assert self.projection.project(-12.0464, -77.0428) == (0.0, 0.0)

    def test_east_is_positive_x(self):
        """Test increasing longitude moves right."""
        x, y = self.projection.project(-12.0464, -77.0328)
        assert x == pytest.approx(20.0)
        assert y == pytest.approx(0.0)

    def test_north_is_negative_y(self):
        """Test increasing latitude moves up the screen."""
        x, y = self.projection.project(-12.0364, -77.0428)
        assert x == pytest.approx(0.0)
        assert y == pytest.approx(-20.0)

    def test_sample_report_position(self):
        """Test Callao sample report position."""
        x, y = self.projection.project(-12.0565, -77.1181)
        assert x == pytest.approx(-150.6)
        assert y == pytest.approx(20.2)

    def test_projection_is_deterministic(self):
        """Test same input gives identical output."""
        first = self.projection.project(-11.9932, -76.9976)
        second = self.projection.project(-11.9932, -76.9976)
        assert first == second

    def test_origin_offset(self):
        """Test configured origin shifts every point."""
        shifted = GeoProjection(center_lat=-12.0464, center_lng=-77.0428, scale=2000, origin_x=50, origin_y=50)
        assert shifted.project(-12.0464, -77.0428) == (50.0, 50.0)

    def test_unproject_inverts_project(self):
        """Test unproject returns the original coordinate."""
        x, y = self.projection.project(-12.2127, -76.9388)
        lat, lng = self.projection.unproject(x, y)
        assert lat == pytest.approx(-12.2127)
        assert lng == pytest.approx(-76.9388)

    def test_project_location(self):
        """Test projecting a Location object."""
        location = Location(lat=-12.0464, lng=-77.0428, address="Lima")
        assert self.projection.project_location(location) == (0.0, 0.0)

    @pytest.mark.parametrize("lat,lng", [
        (91.0, 0.0),
        (-90.5, 0.0),
        (0.0, 180.5),
        (0.0, -181.0),
        (math.nan, 0.0),
        (0.0, math.inf),
    ])
    def test_invalid_coordinates_raise(self, lat, lng):
        """Test out-of-range or non-finite input is rejected, not clamped."""
        with pytest.raises(InvalidCoordinate):
            self.projection.project(lat, lng)

    def test_invalid_coordinate_is_value_error(self):
        """Test InvalidCoordinate can be handled as ValueError."""
        with pytest.raises(ValueError):
            validate_coordinate(100.0, 0.0)

    def test_bounds_are_inclusive(self):
        """Test the extreme valid values are accepted."""
        validate_coordinate(90.0, 180.0)
        validate_coordinate(-90.0, -180.0)

    def test_invalid_scale(self):
        """Test a non-positive scale is rejected."""
        with pytest.raises(ValueError):
            GeoProjection(center_lat=0, center_lng=0, scale=0)
