"""
Tests for environment-driven configuration.
"""

from riverconditions.client import RiverDataClient
from riverconditions.config import Config, ReportConfig, UpstreamConfig, WeatherConfig


class TestConfig:
    """Test defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in ("USGS_IV_URL", "NWRFC_XML_URL", "RIVER_HTTP_TIMEOUT", "RIVER_VERIFY_SSL"):
            monkeypatch.delenv(name, raising=False)

        config = UpstreamConfig()

        assert config.usgs_url == "https://waterservices.usgs.gov/nwis/iv/"
        assert config.nwrfc_url == "https://www.nwrfc.noaa.gov/xml/xml.cgi"
        assert config.timeout == 15.0
        assert config.verify_ssl is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("RIVER_HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("RIVER_VERIFY_SSL", "false")
        monkeypatch.setenv("OPENWEATHER_KEY", "abc123")

        config = Config.load()

        assert config.upstream.timeout == 2.5
        assert config.upstream.verify_ssl is False
        assert config.weather.api_key == "abc123"
        assert config.weather.timeout == 2.5
        assert config.weather.verify_ssl is False
        assert config.report.timeout == 2.5
        assert config.report.verify_ssl is False
        assert config.report.source == "caddis"

    def test_empty_api_key_is_missing(self, monkeypatch):
        monkeypatch.setenv("OPENWEATHER_KEY", "")

        assert WeatherConfig().api_key is None

    def test_client_uses_config(self):
        config = UpstreamConfig(
            usgs_url="https://usgs.test/iv/", nwrfc_url="https://nwrfc.test/", timeout=3
        )

        client = RiverDataClient(config)

        assert client.usgs.base_url == "https://usgs.test/iv/"
        assert client.nwrfc.base_url == "https://nwrfc.test/"
        assert client.usgs.timeout == 3
        assert client.usgs._client is client.nwrfc._client

    def test_collaborator_defaults_follow_upstream(self, monkeypatch):
        for name in ("RIVER_HTTP_TIMEOUT", "RIVER_VERIFY_SSL"):
            monkeypatch.delenv(name, raising=False)

        for config in (WeatherConfig(), ReportConfig()):
            assert config.timeout == 15.0
            assert config.verify_ssl is True
