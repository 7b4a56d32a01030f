"""
Fishing conditions summary: the river record plus weather and advice.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from .client import RiverDataClient
from .config import UpstreamConfig, WeatherConfig
from .engine import get_river_record
from .models import RiverRecord
from .recommendations import FlyRecommendation, get_target_species, recommend_fly_setup
from .rivers import normalize_river_id
from .sync import add_sync_version
from .weather import WeatherReport, fetch_weather

logger = logging.getLogger(__name__)


@dataclass
class FishingConditions:
    """Everything the front end shows for one river."""

    location: str
    record: RiverRecord
    weather: WeatherReport
    recommendation: FlyRecommendation
    species: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"location": self.location}
        record = self.record.to_dict()
        record.pop("river_id")
        data.update(record)
        data["weather"] = self.weather.to_dict()
        data["recommendation"] = self.recommendation.to_dict()
        data["species"] = list(self.species)
        return data


@add_sync_version
async def get_fishing_conditions(
    river_id: str,
    client: Optional[RiverDataClient] = None,
    weather_config: Optional[WeatherConfig] = None,
    on_date: Optional[date] = None,
    upstream_config: Optional[UpstreamConfig] = None,
) -> FishingConditions:
    """
    Gather the river record and weather concurrently, then add the static
    fly and species advice.

    Args:
        river_id: River identifier, case-insensitive
        client: RiverDataClient to use. If not provided, a temporary one is created
        weather_config: Weather settings. Defaults to the environment
        on_date: Date used for seasonal fly choices. Defaults to today
        upstream_config: Upstream settings for the temporary river client

    Returns:
        FishingConditions for the river
    """
    key = normalize_river_id(river_id)
    logger.info(f"Fetching fishing conditions for {key}")

    record, weather = await asyncio.gather(
        get_river_record(key, client=client, config=upstream_config),
        fetch_weather(key, config=weather_config),
    )

    return FishingConditions(
        location=key,
        record=record,
        weather=weather,
        recommendation=recommend_fly_setup(key, on_date=on_date),
        species=get_target_species(key),
    )
