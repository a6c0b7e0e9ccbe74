import pytest
from pydantic import ValidationError

from settings import (
    APISettings,
    CORSSettings,
    MeterSettings,
    Settings,
    SimulatorSettings,
    get_settings,
)


@pytest.mark.unit
class TestMeterSettings:
    def test_defaults(self):
        settings = MeterSettings()
        assert settings.noise_threshold_m == 15.0
        assert settings.gps_correction_factor == 1.15
        assert settings.rebate_per_km == 0.125
        assert settings.waiting_tick_seconds == 1.0
        assert settings.log_level == "INFO"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("METER_NOISE_THRESHOLD_M", "20")
        monkeypatch.setenv("METER_LOG_FORMAT", "json")
        monkeypatch.setenv("METER_ENVIRONMENT", "production")

        settings = MeterSettings()
        assert settings.noise_threshold_m == 20.0
        assert settings.log_format == "json"
        assert settings.environment == "production"

    def test_validation(self):
        with pytest.raises(ValidationError):
            MeterSettings(gps_correction_factor=0.5)

        with pytest.raises(ValidationError):
            MeterSettings(rebate_per_km=1.0)

        with pytest.raises(ValidationError):
            MeterSettings(log_level="TRACE")


@pytest.mark.unit
class TestSimulatorSettings:
    def test_defaults(self):
        settings = SimulatorSettings()
        assert settings.step_m == 100.0
        assert settings.interval_seconds == 1.0

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SIMULATOR_BEARING_DEG", "90")
        assert SimulatorSettings().bearing_deg == 90.0

    def test_bearing_range(self):
        with pytest.raises(ValidationError):
            SimulatorSettings(bearing_deg=360.0)


@pytest.mark.unit
class TestAPISettings:
    def test_port_range(self):
        with pytest.raises(ValidationError):
            APISettings(port=0)

    def test_cors_origin_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", " http://a.test , ,http://b.test")
        assert CORSSettings().origin_list == ["http://a.test", "http://b.test"]


@pytest.mark.unit
class TestSettings:
    def test_aggregates_sections(self):
        settings = get_settings()
        assert isinstance(settings, Settings)
        assert isinstance(settings.meter, MeterSettings)
        assert isinstance(settings.simulator, SimulatorSettings)
        assert isinstance(settings.api, APISettings)
