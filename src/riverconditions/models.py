"""
Data models for river telemetry, profiles and per-request river records.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class FlowStatus(str, Enum):
    """Classification of the current flow against a river's thresholds."""

    LOW = "low"
    FAIR = "fair"
    OPTIMAL = "optimal"
    HIGH = "high"


class SourceKind(str, Enum):
    """Upstream telemetry source a station identifier belongs to."""

    USGS = "usgs"  # JSON instantaneous values
    NWRFC = "nwrfc"  # XML hydrological bulletin


class SourceStatus(str, Enum):
    """Outcome of a single adapter call."""

    OK = "ok"
    PARTIAL = "partial"  # some requested series missing or samples dropped
    FAILED = "failed"


@dataclass(frozen=True)
class FlowThresholds:
    """Flow classification bands in cubic feet per second."""

    low: float
    optimal_low: float
    optimal_high: float
    high: float

    def __post_init__(self) -> None:
        if not (self.low < self.optimal_low <= self.optimal_high < self.high):
            raise ValueError(
                "Thresholds must satisfy low < optimal_low <= optimal_high < high, "
                f"got {self.low}/{self.optimal_low}/{self.optimal_high}/{self.high}"
            )

    def to_dict(self) -> Dict[str, float]:
        return {
            "low": self.low,
            "optimal_low": self.optimal_low,
            "optimal_high": self.optimal_high,
            "high": self.high,
        }


@dataclass(frozen=True)
class Coordinates:
    """Geographic location used by the weather lookup."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class StationRef:
    """
    A station identifier tagged with the source that consumes it.

    For USGS stations ``parameters`` lists the parameter codes to request
    (e.g. '00060' discharge, '00010' water temperature). ``lookback_days``
    is the history window; None asks USGS for the latest value only.
    """

    source: SourceKind
    station_id: str
    parameters: Tuple[str, ...] = ()
    lookback_days: Optional[int] = None


@dataclass(frozen=True)
class RiverProfile:
    """Static configuration for one supported river."""

    river_id: str
    name: str
    stations: Tuple[StationRef, ...] = ()
    coordinates: Optional[Coordinates] = None
    thresholds: Optional[FlowThresholds] = None

    @classmethod
    def empty(cls, river_id: str) -> "RiverProfile":
        """Profile for an unrecognized river: no stations, no thresholds."""
        return cls(river_id=river_id, name=river_id)


@dataclass(frozen=True)
class TelemetrySample:
    """A single observation from an upstream source."""

    timestamp: datetime
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.timestamp.isoformat(), "value": self.value}


@dataclass
class SourceResult:
    """Normalized output of one adapter call, independent of wire format."""

    source: SourceKind
    station_id: str
    status: SourceStatus
    flow: List[TelemetrySample] = field(default_factory=list)
    temperature_f: List[TelemetrySample] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None

    @classmethod
    def failed(
        cls, source: SourceKind, station_id: str, error: str
    ) -> "SourceResult":
        return cls(
            source=source,
            station_id=station_id,
            status=SourceStatus.FAILED,
            error=error,
        )

    @property
    def latest_temperature_f(self) -> Optional[float]:
        if not self.temperature_f:
            return None
        return self.temperature_f[-1].value


@dataclass
class RiverRecord:
    """
    Canonical per-request summary of a river's hydrological conditions.

    Optional fields are None when unavailable and are omitted entirely
    from ``to_dict()``. ``flow_status`` and ``thresholds`` are only ever
    set together.
    """

    river_id: str
    flow_history: List[TelemetrySample] = field(default_factory=list)
    current_flow_cfs: Optional[float] = None
    current_temp_f: Optional[float] = None
    flow_status: Optional[FlowStatus] = None
    thresholds: Optional[FlowThresholds] = None
    sources: List[SourceResult] = field(default_factory=list, repr=False)

    def to_dict(self, include_sources: bool = False) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary, leaving out absent fields."""
        data: Dict[str, Any] = {
            "river_id": self.river_id,
            "flow_history": [sample.to_dict() for sample in self.flow_history],
        }
        if self.current_flow_cfs is not None:
            data["current_flow_cfs"] = self.current_flow_cfs
        if self.current_temp_f is not None:
            data["current_temp_f"] = self.current_temp_f
        if self.flow_status is not None and self.thresholds is not None:
            data["flow_status"] = self.flow_status.value
            data["thresholds"] = self.thresholds.to_dict()
        if include_sources:
            data["sources"] = [
                {
                    "source": result.source.value,
                    "station_id": result.station_id,
                    "status": result.status.value,
                    "error": result.error,
                }
                for result in self.sources
            ]
        return data

    def flow_history_to_pandas(self) -> Any:
        """Convert the flow history to a pandas DataFrame with time/value columns."""
        try:
            import pandas as pd
        except ImportError:
            raise ImportError(
                "pandas is required for DataFrame conversion. Install with: pip install pandas"
            ) from None

        return pd.DataFrame(
            {
                "time": pd.to_datetime(
                    [sample.timestamp for sample in self.flow_history], utc=True
                ),
                "value": [sample.value for sample in self.flow_history],
            }
        )
