"""
EcoVision - Geospatial Utilities
Coordinate validation and the local-plane projection used by the map view.
"""

import math
from typing import Optional, Tuple
from dataclasses import dataclass

from ecovision.core.config import settings
from ecovision.core.exceptions import InvalidCoordinate


@dataclass(frozen=True)
class Location:
    """Geographic point of a report with its human readable address."""
    lat: float
    lng: float
    address: str = ""

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng, "address": self.address}


def validate_coordinate(lat: float, lng: float) -> None:
    """
    Check that a coordinate pair is finite and within range.

    Raises:
        InvalidCoordinate: if lat is outside [-90, 90], lng outside
            [-180, 180], or either value is NaN/infinite
    """
    try:
        lat_ok = math.isfinite(lat) and -90.0 <= lat <= 90.0
        lng_ok = math.isfinite(lng) and -180.0 <= lng <= 180.0
    except TypeError:
        raise InvalidCoordinate(lat, lng) from None

    if not (lat_ok and lng_ok):
        raise InvalidCoordinate(lat, lng)


class GeoProjection:
    """
    Equirectangular local-plane projection around a fixed reference point.

    x = origin_x + (lng - center_lng) * scale
    y = origin_y + (center_lat - lat) * scale

    This is only accurate for small deltas around the reference point
    (city scale). Distortion grows with distance from the center and
    towards the poles.
    """

    def __init__(
        self,
        center_lat: Optional[float] = None,
        center_lng: Optional[float] = None,
        scale: Optional[float] = None,
        origin_x: Optional[float] = None,
        origin_y: Optional[float] = None,
    ):
        """
        Initialize projection.

        Args:
            center_lat, center_lng: Reference point (defaults from settings)
            scale: Plane units per degree
            origin_x, origin_y: Plane position of the reference point
        """
        self.center_lat = settings.map_center_lat if center_lat is None else center_lat
        self.center_lng = settings.map_center_lng if center_lng is None else center_lng
        self.scale = settings.map_scale if scale is None else scale
        self.origin_x = settings.map_origin_x if origin_x is None else origin_x
        self.origin_y = settings.map_origin_y if origin_y is None else origin_y

        validate_coordinate(self.center_lat, self.center_lng)
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError(f"Projection scale must be a positive number, got {self.scale}")

    def project(self, lat: float, lng: float) -> Tuple[float, float]:
        """
        Map a geographic coordinate onto the plane.

        Args:
            lat: Latitude in decimal degrees
            lng: Longitude in decimal degrees

        Returns:
            Tuple of (x, y) plane coordinates

        Raises:
            InvalidCoordinate: for non-finite or out-of-range input
        """
        validate_coordinate(lat, lng)

        x = self.origin_x + (lng - self.center_lng) * self.scale
        y = self.origin_y + (self.center_lat - lat) * self.scale

        return (x, y)

    def project_location(self, location: Location) -> Tuple[float, float]:
        return self.project(location.lat, location.lng)

    def unproject(self, x: float, y: float) -> Tuple[float, float]:
        """Inverse of project(): plane (x, y) back to (lat, lng)."""
        lng = self.center_lng + (x - self.origin_x) / self.scale
        lat = self.center_lat - (y - self.origin_y) / self.scale
        return (lat, lng)


def project(lat: float, lng: float) -> Tuple[float, float]:
    """Project with the configured reference point and scale."""
    return GeoProjection().project(lat, lng)
