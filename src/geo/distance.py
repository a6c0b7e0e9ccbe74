"""Geodesic distance between GPS fixes.

Metering distance is the straight-line geodesic between consecutive fixes,
computed with Vincenty's inverse formula on the WGS84 ellipsoid. When the
iteration does not converge (nearly antipodal points) the great-circle
Haversine distance is used instead. Either way the result is scaled by a
calibration factor compensating for the smoothing consumer GPS receivers
apply to reported positions.
"""

from math import atan, atan2, cos, isnan, radians, sin, sqrt, tan

from geo.fix import Fix

EARTH_RADIUS_M = 6_371_000  # Mean Earth radius in meters

# WGS84 ellipsoid
WGS84_A = 6_378_137.0
WGS84_B = 6_356_752.314245
WGS84_F = 1 / 298.257223563

VINCENTY_TOLERANCE_RAD = 1e-12
VINCENTY_MAX_ITERATIONS = 100

GPS_CORRECTION_FACTOR = 1.15


def haversine_distance_m(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance between the two points in meters
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def vincenty_distance_m(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    max_iterations: int = VINCENTY_MAX_ITERATIONS,
) -> float | None:
    """Calculate the ellipsoidal distance between two points in meters.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees
        max_iterations: Iteration cap for the lambda refinement

    Returns:
        Distance in meters, or None if the iteration did not converge
    """
    big_l = radians(lon2 - lon1)
    u1 = atan((1 - WGS84_F) * tan(radians(lat1)))
    u2 = atan((1 - WGS84_F) * tan(radians(lat2)))
    sin_u1, cos_u1 = sin(u1), cos(u1)
    sin_u2, cos_u2 = sin(u2), cos(u2)

    lam = big_l
    for _ in range(max_iterations):
        sin_lam, cos_lam = sin(lam), cos(lam)
        sin_sigma = sqrt(
            (cos_u2 * sin_lam) ** 2 + (cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam) ** 2
        )
        if sin_sigma == 0:
            return 0.0  # coincident points

        cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
        sigma = atan2(sin_sigma, cos_sigma)
        sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
        cos_sq_alpha = 1 - sin_alpha**2
        if cos_sq_alpha == 0:
            cos_2sigma_m = 0.0  # equatorial line
        else:
            cos_2sigma_m = cos_sigma - 2 * sin_u1 * sin_u2 / cos_sq_alpha
            if isnan(cos_2sigma_m):
                cos_2sigma_m = 0.0

        c = WGS84_F / 16 * cos_sq_alpha * (4 + WGS84_F * (4 - 3 * cos_sq_alpha))
        lam_prev = lam
        lam = big_l + (1 - c) * WGS84_F * sin_alpha * (
            sigma + c * sin_sigma * (cos_2sigma_m + c * cos_sigma * (-1 + 2 * cos_2sigma_m**2))
        )
        if abs(lam - lam_prev) <= VINCENTY_TOLERANCE_RAD:
            break
    else:
        return None

    u_sq = cos_sq_alpha * (WGS84_A**2 - WGS84_B**2) / WGS84_B**2
    big_a = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
    big_b = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))
    delta_sigma = (
        big_b
        * sin_sigma
        * (
            cos_2sigma_m
            + big_b
            / 4
            * (
                cos_sigma * (-1 + 2 * cos_2sigma_m**2)
                - big_b / 6 * cos_2sigma_m * (-3 + 4 * sin_sigma**2) * (-3 + 4 * cos_2sigma_m**2)
            )
        )
    )

    return WGS84_B * big_a * (sigma - delta_sigma)


def geodesic_distance_m(
    p1: Fix,
    p2: Fix,
    correction_factor: float = GPS_CORRECTION_FACTOR,
) -> float:
    """Metering distance between two fixes in meters.

    Vincenty on WGS84 with a Haversine fallback, multiplied once by
    ``correction_factor`` whichever path produced the raw value.
    """
    raw = vincenty_distance_m(*p1.coords, *p2.coords)
    if raw is None:
        raw = haversine_distance_m(*p1.coords, *p2.coords)
    return raw * correction_factor
