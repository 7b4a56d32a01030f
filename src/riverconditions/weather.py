"""
Current weather for a river from the OpenWeather API.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .config import WeatherConfig
from .exceptions import ConfigurationError, RiverConditionsError
from .parsing import round_half_up
from .rivers import require_river_profile

logger = logging.getLogger(__name__)

UNAVAILABLE = "Unavailable"


@dataclass
class WeatherReport:
    """Air temperature, description and wind at a river."""

    air_temp_f: Optional[int]
    conditions: str
    wind_mph: Optional[float]

    @classmethod
    def unavailable(cls) -> "WeatherReport":
        return cls(air_temp_f=None, conditions=UNAVAILABLE, wind_mph=None)

    @property
    def is_available(self) -> bool:
        return self.conditions != UNAVAILABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "air_temp_f": self.air_temp_f,
            "conditions": self.conditions,
            "wind_mph": self.wind_mph,
        }


def _parse_weather(payload: Dict[str, Any]) -> WeatherReport:
    return WeatherReport(
        air_temp_f=round_half_up(float(payload["main"]["temp"])),
        conditions=payload["weather"][0]["description"],
        wind_mph=payload["wind"]["speed"],
    )


async def fetch_weather(
    river_id: str,
    config: Optional[WeatherConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> WeatherReport:
    """
    Fetch current weather at a river's coordinates.

    Never raises: unknown rivers, a missing API key and upstream failures all
    produce ``WeatherReport.unavailable()``.
    """
    config = config or WeatherConfig()

    try:
        profile = require_river_profile(river_id)
        if profile.coordinates is None:
            raise ConfigurationError(f"Missing coordinates for river: {river_id}")
        if not config.api_key:
            raise ConfigurationError("Missing OPENWEATHER_KEY in environment")
    except RiverConditionsError as e:
        logger.warning(f"Weather unavailable for {river_id}: {e}")
        return WeatherReport.unavailable()

    params = {
        "lat": str(profile.coordinates.latitude),
        "lon": str(profile.coordinates.longitude),
        "units": "imperial",
        "appid": config.api_key,
    }

    client = http_client or httpx.AsyncClient(
        timeout=config.timeout, verify=config.verify_ssl
    )
    try:
        response = await client.get(config.url, params=params, timeout=config.timeout)
        response.raise_for_status()
        return _parse_weather(response.json())
    except httpx.HTTPError as e:
        logger.warning(f"OpenWeather fetch failed for {river_id}: {e}")
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.warning(f"Unexpected OpenWeather response for {river_id}: {e}")
    finally:
        if http_client is None:
            await client.aclose()

    return WeatherReport.unavailable()
