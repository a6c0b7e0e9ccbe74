from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MeterSettings(BaseSettings):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    environment: str = "development"

    # Distance metering
    noise_threshold_m: float = Field(
        default=15.0,
        ge=0.0,
        le=200.0,
        description="Fixes closer than this to the baseline are treated as GPS jitter",
    )
    gps_correction_factor: float = Field(
        default=1.15,
        ge=1.0,
        le=2.0,
        description="Calibration multiplier applied to every geodesic segment",
    )
    rebate_per_km: float = Field(
        default=0.125,
        ge=0.0,
        lt=1.0,
        description="Kilometers discounted for each completed raw kilometer",
    )

    # Scheduling
    waiting_tick_seconds: float = Field(default=1.0, gt=0.0, le=60.0)
    step_seconds: float = Field(
        default=0.1,
        gt=0.0,
        le=5.0,
        description="Simulated seconds advanced per runner iteration",
    )

    model_config = SettingsConfigDict(env_prefix="METER_")


class SimulatorSettings(BaseSettings):
    """Synthetic fix generator used for demonstrations and testing."""

    step_m: float = Field(default=100.0, gt=0.0, le=1000.0)
    interval_seconds: float = Field(default=1.0, gt=0.0, le=60.0)
    bearing_deg: float = Field(default=0.0, ge=0.0, lt=360.0)
    noise_meters: float = Field(default=0.0, ge=0.0, le=50.0)
    origin_latitude: float = Field(default=19.7047, ge=-90.0, le=90.0)
    origin_longitude: float = Field(default=-103.4617, ge=-180.0, le=180.0)

    model_config = SettingsConfigDict(env_prefix="SIMULATOR_")


class APISettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    command_timeout_seconds: float = Field(default=5.0, gt=0.0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="API_")


class CORSSettings(BaseSettings):
    origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = SettingsConfigDict(env_prefix="CORS_")

    @field_validator("origins")
    @classmethod
    def strip_origins(cls, v: str) -> str:
        return ",".join(origin.strip() for origin in v.split(",") if origin.strip())

    @property
    def origin_list(self) -> list[str]:
        return self.origins.split(",") if self.origins else []


class Settings(BaseSettings):
    meter: MeterSettings = Field(default_factory=MeterSettings)
    simulator: SimulatorSettings = Field(default_factory=SimulatorSettings)
    api: APISettings = Field(default_factory=APISettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
