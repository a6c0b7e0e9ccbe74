"""GPS fix model delivered by the location subsystem."""

import time

from pydantic import BaseModel, ConfigDict, Field


class Fix(BaseModel):
    """One GPS sample. Timestamps are informational only."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    timestamp: float = Field(default_factory=time.time, ge=0.0)

    @property
    def coords(self) -> tuple[float, float]:
        """(latitude, longitude), the argument order of the geo.distance functions."""
        return self.latitude, self.longitude
