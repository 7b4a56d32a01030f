"""
River profile registry.

Profiles are validated when this module is imported and exposed through a
read-only mapping; lookups are case-insensitive.
"""

from types import MappingProxyType
from typing import List, Mapping, Optional

from .exceptions import UnknownRiverError
from .models import (
    Coordinates,
    FlowThresholds,
    RiverProfile,
    SourceKind,
    StationRef,
)

# USGS parameter codes
DISCHARGE = "00060"  # Discharge, cubic feet per second
WATER_TEMPERATURE = "00010"  # Water temperature, degrees Celsius

_PROFILES = (
    RiverProfile(
        river_id="mckenzie_hayden",
        name="McKenzie River at Hayden Bridge",
        stations=(
            StationRef(
                SourceKind.USGS,
                "14164900",
                parameters=(DISCHARGE, WATER_TEMPERATURE),
                lookback_days=2,
            ),
        ),
        coordinates=Coordinates(latitude=44.093, longitude=-122.973),
        thresholds=FlowThresholds(
            low=900, optimal_low=1000, optimal_high=2500, high=3000
        ),
    ),
    RiverProfile(
        river_id="willamette_eugene",
        name="Willamette River at Eugene",
        stations=(
            # Temperature only; the gage does not publish discharge.
            StationRef(SourceKind.USGS, "14158050", parameters=(WATER_TEMPERATURE,)),
            StationRef(SourceKind.NWRFC, "EUGO3", lookback_days=2),
        ),
        coordinates=Coordinates(latitude=44.058, longitude=-123.092),
        thresholds=FlowThresholds(
            low=1000, optimal_low=2000, optimal_high=4000, high=5000
        ),
    ),
)


def _build_registry(profiles) -> Mapping[str, RiverProfile]:
    registry = {}
    for profile in profiles:
        key = profile.river_id.lower()
        if key != profile.river_id:
            raise ValueError(f"River id must be lowercase: {profile.river_id!r}")
        if key in registry:
            raise ValueError(f"Duplicate river id: {key!r}")
        registry[key] = profile
    return MappingProxyType(registry)


RIVER_PROFILES: Mapping[str, RiverProfile] = _build_registry(_PROFILES)


def normalize_river_id(river_id: str) -> str:
    return river_id.strip().lower()


def get_river_profile(river_id: str) -> Optional[RiverProfile]:
    """Return the profile for ``river_id`` or None if it is not configured."""
    return RIVER_PROFILES.get(normalize_river_id(river_id))


def require_river_profile(river_id: str) -> RiverProfile:
    """Like get_river_profile() but raises UnknownRiverError."""
    profile = get_river_profile(river_id)
    if profile is None:
        raise UnknownRiverError(f"Unknown river: {river_id!r}")
    return profile


def list_rivers() -> List[str]:
    """List configured river identifiers."""
    return sorted(RIVER_PROFILES)
