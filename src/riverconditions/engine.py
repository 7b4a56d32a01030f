"""
Aggregation engine: fan out to a river's telemetry sources, merge their
samples into one record and classify the current flow.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from .client import RiverDataClient
from .config import UpstreamConfig
from .models import (
    FlowStatus,
    FlowThresholds,
    RiverProfile,
    RiverRecord,
    SourceKind,
    SourceResult,
    StationRef,
    TelemetrySample,
)
from .rivers import get_river_profile, normalize_river_id
from .sources import fetch_nwrfc_result, fetch_usgs_result
from .sync import add_sync_version

logger = logging.getLogger(__name__)


def classify_flow(flow_cfs: float, thresholds: FlowThresholds) -> FlowStatus:
    """
    Classify a flow against a river's thresholds.

    ``low`` and ``high`` are strict comparisons and are checked first; the
    optimal band is inclusive. A flow exactly at ``low`` or ``high`` is
    therefore FAIR.
    """
    if flow_cfs < thresholds.low:
        return FlowStatus.LOW
    if flow_cfs > thresholds.high:
        return FlowStatus.HIGH
    if thresholds.optimal_low <= flow_cfs <= thresholds.optimal_high:
        return FlowStatus.OPTIMAL
    return FlowStatus.FAIR


def merge_flow_history(
    histories: Iterable[Sequence[TelemetrySample]],
) -> List[TelemetrySample]:
    """
    Merge sample sequences into one ascending, timestamp-unique history.

    When several samples share a timestamp the last one seen wins.
    """
    by_time = {}
    for history in histories:
        for sample in history:
            by_time[sample.timestamp] = sample
    return sorted(by_time.values(), key=lambda sample: sample.timestamp)


def latest_temperature(results: Sequence[SourceResult]) -> Optional[float]:
    """Temperature from the most recently fetched result that has one."""
    latest = None
    for result in results:
        if result.latest_temperature_f is None:
            continue
        if latest is None or result.fetched_at >= latest.fetched_at:
            latest = result
    return None if latest is None else latest.latest_temperature_f


def build_river_record(
    river_id: str, profile: RiverProfile, results: Sequence[SourceResult]
) -> RiverRecord:
    """Combine adapter results into a RiverRecord for ``river_id``."""
    record = RiverRecord(river_id=river_id, sources=list(results))
    record.flow_history = merge_flow_history(result.flow for result in results)

    if record.flow_history:
        record.current_flow_cfs = record.flow_history[-1].value

    record.current_temp_f = latest_temperature(results)

    if record.current_flow_cfs is not None and profile.thresholds is not None:
        record.flow_status = classify_flow(record.current_flow_cfs, profile.thresholds)
        record.thresholds = profile.thresholds

    return record


async def fetch_station(client: RiverDataClient, station: StationRef) -> SourceResult:
    """Dispatch a station to the adapter for its source."""
    if station.source is SourceKind.USGS:
        return await fetch_usgs_result(client.usgs, station)
    if station.source is SourceKind.NWRFC:
        return await fetch_nwrfc_result(client.nwrfc, station)
    raise ValueError(f"Unsupported source: {station.source}")


async def collect_source_results(
    client: RiverDataClient, stations: Sequence[StationRef]
) -> List[SourceResult]:
    """
    Fetch all stations concurrently and wait for every one of them.

    A call that raises is converted into a FAILED result so it cannot
    affect its siblings.
    """
    outcomes = await asyncio.gather(
        *(fetch_station(client, station) for station in stations),
        return_exceptions=True,
    )

    results = []
    for station, outcome in zip(stations, outcomes):
        if isinstance(outcome, Exception):
            logger.warning(
                f"{station.source.value} fetch for {station.station_id} raised: {outcome}"
            )
            results.append(
                SourceResult.failed(station.source, station.station_id, str(outcome))
            )
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)
    return results


@add_sync_version
async def get_river_record(
    river_id: str,
    client: Optional[RiverDataClient] = None,
    config: Optional[UpstreamConfig] = None,
) -> RiverRecord:
    """
    Build the current RiverRecord for a river.

    Unknown rivers are not an error: the record simply has an empty flow
    history and no classification.

    Args:
        river_id: River identifier, case-insensitive (e.g., 'McKenzie_Hayden')
        client: RiverDataClient to use. If not provided, a temporary one is created
        config: Upstream settings for the temporary client. Ignored when
            `client` is given

    Returns:
        RiverRecord for this request

    Examples:
        >>> record = await get_river_record("mckenzie_hayden")
        >>> record = get_river_record.sync("mckenzie_hayden")
    """
    key = normalize_river_id(river_id)
    profile = get_river_profile(key)
    if profile is None:
        logger.info(f"No profile configured for river {key!r}")
        profile = RiverProfile.empty(key)

    if not profile.stations:
        results: List[SourceResult] = []
    elif client is None:
        async with RiverDataClient(config) as temp_client:
            results = await collect_source_results(temp_client, profile.stations)
    else:
        results = await collect_source_results(client, profile.stations)

    record = build_river_record(key, profile, results)
    logger.debug(
        f"{key}: {len(record.flow_history)} flow samples, "
        f"flow={record.current_flow_cfs}, temp={record.current_temp_f}, "
        f"status={record.flow_status}"
    )
    return record
