"""Shared builders for test data."""

from geo.fix import Fix

# Downtown Ciudad Guzman
ORIGIN_LAT = 19.7047
ORIGIN_LON = -103.4617

# 0.001 deg of latitude is ~111 m, ~128 m after the GPS correction factor
LAT_STEP = 0.001


def make_fix(lat: float = ORIGIN_LAT, lon: float = ORIGIN_LON, timestamp: float = 0.0) -> Fix:
    return Fix(latitude=lat, longitude=lon, timestamp=timestamp)
