"""
Configuration for upstream services, loaded from the environment.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


def _env_timeout() -> float:
    return float(os.getenv("RIVER_HTTP_TIMEOUT", "15"))


def _env_verify_ssl() -> bool:
    return _env_bool("RIVER_VERIFY_SSL", True)


@dataclass
class UpstreamConfig:
    """Telemetry endpoints and HTTP settings shared by the adapters."""

    usgs_url: str = field(
        default_factory=lambda: os.getenv(
            "USGS_IV_URL", "https://waterservices.usgs.gov/nwis/iv/"
        )
    )
    nwrfc_url: str = field(
        default_factory=lambda: os.getenv(
            "NWRFC_XML_URL", "https://www.nwrfc.noaa.gov/xml/xml.cgi"
        )
    )
    timeout: float = field(default_factory=_env_timeout)
    verify_ssl: bool = field(default_factory=_env_verify_ssl)
    user_agent: str = "riverconditions/0.1.0"


@dataclass
class WeatherConfig:
    """OpenWeather current-conditions settings."""

    api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENWEATHER_KEY") or None
    )
    url: str = field(
        default_factory=lambda: os.getenv(
            "OPENWEATHER_URL", "https://api.openweathermap.org/data/2.5/weather"
        )
    )
    timeout: float = field(default_factory=_env_timeout)
    verify_ssl: bool = field(default_factory=_env_verify_ssl)


@dataclass
class ReportConfig:
    """Fly-shop report scraper settings."""

    listing_url: str = field(
        default_factory=lambda: os.getenv(
            "FLY_REPORT_URL",
            "https://oregonflyfishingblog.com/category/fishing-reports/",
        )
    )
    timeout: float = field(default_factory=_env_timeout)
    verify_ssl: bool = field(default_factory=_env_verify_ssl)
    source: str = "caddis"


@dataclass
class Config:
    """Main configuration container."""

    upstream: UpstreamConfig
    weather: WeatherConfig
    report: ReportConfig

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls(
            upstream=UpstreamConfig(),
            weather=WeatherConfig(),
            report=ReportConfig(),
        )
