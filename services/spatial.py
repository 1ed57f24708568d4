"""
Point-in-radius matching over shop coordinates.

Distances are great-circle angles on a sphere of Earth's mean equatorial
radius. The ellipsoid is ignored, which costs up to ~0.3% in accuracy.
"""
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from sqlalchemy import and_, or_

from core.exceptions import ValidationError

EARTH_RADIUS_KM = 6378.1

# Keeps the SQL box a strict superset of the cap despite float rounding
_BOX_MARGIN_DEGREES = 1e-9


def km_to_radians(radius_km: float) -> float:
    return radius_km / EARTH_RADIUS_KM


def validate_coordinates(longitude: float, latitude: float, field: str = "location") -> Tuple[float, float]:
    """Check a (longitude, latitude) pair is finite and in range."""
    try:
        longitude = float(longitude)
        latitude = float(latitude)
    except (TypeError, ValueError):
        raise ValidationError("Coordinates must be numeric", field=field)

    if not (math.isfinite(longitude) and math.isfinite(latitude)):
        raise ValidationError("Coordinates must be finite numbers", field=field)
    if not -180.0 <= longitude <= 180.0:
        raise ValidationError("Longitude must be between -180 and 180", field=field)
    if not -90.0 <= latitude <= 90.0:
        raise ValidationError("Latitude must be between -90 and 90", field=field)
    return longitude, latitude


def central_angle(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Great-circle angle in radians between two points (haversine)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))


def distance_km(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    return central_angle(lon1, lat1, lon2, lat2) * EARTH_RADIUS_KM


@dataclass(frozen=True)
class SpatialPredicate:
    """Spherical cap around a center point."""

    center_longitude: float
    center_latitude: float
    radius_radians: float

    def contains(self, longitude: float, latitude: float) -> bool:
        angle = central_angle(self.center_longitude, self.center_latitude, longitude, latitude)
        return angle <= self.radius_radians

    def sql_prefilter(self, longitude_column, latitude_column):
        """
        Bounding-box condition covering the cap, for narrowing rows in SQL.

        Rows passing the box still have to pass contains(); returns None when
        the cap is too large for a box to help.
        """
        radius = self.radius_radians
        if radius >= math.pi / 2:
            return None

        lat_delta = math.degrees(radius) + _BOX_MARGIN_DEGREES
        min_lat = self.center_latitude - lat_delta
        max_lat = self.center_latitude + lat_delta

        # The cap covers a pole, so every longitude is in play
        if min_lat <= -90.0 or max_lat >= 90.0:
            return latitude_column.between(max(min_lat, -90.0), min(max_lat, 90.0))

        ratio = math.sin(radius) / math.cos(math.radians(self.center_latitude))
        lon_delta = math.degrees(math.asin(min(1.0, ratio))) + _BOX_MARGIN_DEGREES
        min_lon = self.center_longitude - lon_delta
        max_lon = self.center_longitude + lon_delta

        if min_lon < -180.0:
            lon_condition = or_(longitude_column >= min_lon + 360.0, longitude_column <= max_lon)
        elif max_lon > 180.0:
            lon_condition = or_(longitude_column >= min_lon, longitude_column <= max_lon - 360.0)
        else:
            lon_condition = longitude_column.between(min_lon, max_lon)

        return and_(latitude_column.between(min_lat, max_lat), lon_condition)


def find_within_radius(center: Sequence[float], radius_km: float) -> SpatialPredicate:
    """Build the membership test for points within radius_km of center (lon, lat)."""
    if center is None or len(center) != 2:
        raise ValidationError("Search center needs exactly two coordinates", field="center")
    longitude, latitude = validate_coordinates(center[0], center[1], field="center")

    if radius_km is None or not math.isfinite(radius_km) or radius_km < 0:
        raise ValidationError("Radius must be a non-negative number of kilometers", field="radius")

    return SpatialPredicate(
        center_longitude=longitude,
        center_latitude=latitude,
        radius_radians=km_to_radians(radius_km)
    )


def optional_center(longitude: Optional[float], latitude: Optional[float]) -> Optional[Tuple[float, float]]:
    """A search center only exists when both coordinates were supplied."""
    if longitude is None or latitude is None:
        return None
    return longitude, latitude
