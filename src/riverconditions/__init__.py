"""
Real-time river fishing conditions.

Combines USGS and NWRFC hydrological telemetry into a per-river record,
classifies the current flow, and adds weather, fly-shop reports and fly
recommendations.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .client import RiverDataClient
from .conditions import FishingConditions, get_fishing_conditions
from .config import Config, ReportConfig, UpstreamConfig, WeatherConfig
from .engine import (
    build_river_record,
    classify_flow,
    collect_source_results,
    get_river_record,
    merge_flow_history,
)
from .exceptions import (
    ConfigurationError,
    RiverConditionsError,
    UnknownRiverError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamQueryError,
)
from .models import (
    Coordinates,
    FlowStatus,
    FlowThresholds,
    RiverProfile,
    RiverRecord,
    SourceKind,
    SourceResult,
    SourceStatus,
    StationRef,
    TelemetrySample,
)
from .parsing import celsius_to_f, parse_number, parse_timestamp
from .recommendations import FlyRecommendation, get_target_species, recommend_fly_setup
from .reports import FlyShopReport, get_fly_shop_report
from .rivers import RIVER_PROFILES, get_river_profile, list_rivers, require_river_profile
from .sources import NWRFCClient, USGSClient
from .sync import AsyncSyncBridge, add_sync_version
from .weather import WeatherReport, fetch_weather

__all__ = [
    # Clients
    "RiverDataClient",
    "USGSClient",
    "NWRFCClient",
    # Configuration
    "Config",
    "UpstreamConfig",
    "WeatherConfig",
    "ReportConfig",
    # Models
    "Coordinates",
    "FlowStatus",
    "FlowThresholds",
    "RiverProfile",
    "RiverRecord",
    "SourceKind",
    "SourceResult",
    "SourceStatus",
    "StationRef",
    "TelemetrySample",
    # Registry
    "RIVER_PROFILES",
    "get_river_profile",
    "require_river_profile",
    "list_rivers",
    # Aggregation
    "get_river_record",
    "build_river_record",
    "collect_source_results",
    "classify_flow",
    "merge_flow_history",
    # Parsing helpers
    "celsius_to_f",
    "parse_number",
    "parse_timestamp",
    # Collaborators
    "FishingConditions",
    "get_fishing_conditions",
    "WeatherReport",
    "fetch_weather",
    "FlyShopReport",
    "get_fly_shop_report",
    "FlyRecommendation",
    "recommend_fly_setup",
    "get_target_species",
    # Sync wrappers
    "AsyncSyncBridge",
    "add_sync_version",
    # Exceptions
    "RiverConditionsError",
    "UpstreamError",
    "UpstreamConnectionError",
    "UpstreamQueryError",
    "ConfigurationError",
    "UnknownRiverError",
]
