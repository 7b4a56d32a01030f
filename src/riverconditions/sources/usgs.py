"""
USGS instantaneous-values (JSON) telemetry adapter.

Response shape (abridged)::

    {"value": {"timeSeries": [
        {"variable": {"variableCode": [{"value": "00060"}],
                      "noDataValue": -999999.0},
         "values": [{"value": [{"dateTime": "...", "value": "1500"}, ...]}]},
        ...
    ]}}
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from ..config import UpstreamConfig
from ..exceptions import UpstreamError, UpstreamQueryError
from ..models import SourceKind, SourceResult, SourceStatus, StationRef, TelemetrySample
from ..parsing import celsius_to_f, parse_number, parse_timestamp
from ..rivers import DISCHARGE, WATER_TEMPERATURE
from .base import BaseSourceClient

logger = logging.getLogger(__name__)


class USGSClient(BaseSourceClient):
    """Client for the USGS NWIS instantaneous-values service."""

    SERVICE_NAME = "USGS"
    ACCEPT = "application/json"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        config: Optional[UpstreamConfig] = None,
    ):
        config = config or UpstreamConfig()
        super().__init__(
            base_url or config.usgs_url,
            timeout=timeout,
            http_client=http_client,
            config=config,
        )

    async def get_instantaneous_values(
        self,
        site: str,
        parameter_codes: Sequence[str],
        lookback_days: Optional[int] = None,
    ) -> Dict[str, List[TelemetrySample]]:
        """
        Get instantaneous values for a site, in the source's native units.

        Args:
            site: USGS site number (e.g., '14164900')
            parameter_codes: Parameter codes (e.g., ['00060', '00010'])
            lookback_days: History window in days; None returns the latest value only

        Returns:
            Mapping of every requested parameter code to its samples, sorted by
            time. Codes absent from the response map to an empty list.
        """
        params = {
            "format": "json",
            "sites": site,
            "parameterCd": ",".join(parameter_codes),
            "siteStatus": "all",
        }
        if lookback_days:
            params["period"] = f"P{lookback_days}D"

        response = await self._get(params)

        try:
            payload = response.json()
            return parse_iv_response(payload, parameter_codes)
        except ValueError as e:
            raise UpstreamQueryError(f"Invalid JSON response: {e}") from e
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise UpstreamQueryError(f"Unexpected USGS response structure: {e}") from e


def parse_iv_response(
    payload: Dict[str, Any], parameter_codes: Iterable[str]
) -> Dict[str, List[TelemetrySample]]:
    """Extract per-parameter sample lists from an instantaneous-values document."""
    series_by_code: Dict[str, List[TelemetrySample]] = {
        code: [] for code in parameter_codes
    }

    for series in payload["value"]["timeSeries"]:
        code = _series_code(series)
        if code is None:
            logger.debug("Skipping USGS time series without a parameter code")
            continue
        if code not in series_by_code or series_by_code[code]:
            # Not requested, or an earlier sensor already supplied this code.
            continue

        points = _series_points(series)
        if not points:
            continue

        no_data = parse_number(series["variable"].get("noDataValue"))
        samples = [
            sample
            for sample in (_parse_point(point, no_data) for point in points)
            if sample is not None
        ]
        if len(samples) < len(points):
            logger.debug(
                f"Dropped {len(points) - len(samples)} malformed USGS samples for {code}"
            )
        samples.sort(key=lambda sample: sample.timestamp)
        series_by_code[code] = samples

    return series_by_code


def _series_code(series: Any) -> Optional[str]:
    """Parameter code of a time series, or None if the series is malformed."""
    if not isinstance(series, dict):
        return None
    variable = series.get("variable")
    if not isinstance(variable, dict):
        return None
    codes = variable.get("variableCode")
    if not isinstance(codes, list) or not codes or not isinstance(codes[0], dict):
        return None
    code = codes[0].get("value")
    return code if isinstance(code, str) and code else None


def _series_points(series: Dict[str, Any]) -> List[Any]:
    """Points of the first non-empty values block; [] if there is none."""
    blocks = series.get("values")
    if not isinstance(blocks, list):
        return []
    for block in blocks:
        if isinstance(block, dict) and isinstance(block.get("value"), list) and block["value"]:
            return block["value"]
    return []


def _parse_point(point: Any, no_data: Optional[float]) -> Optional[TelemetrySample]:
    if not isinstance(point, dict):
        return None
    timestamp = parse_timestamp(point.get("dateTime"))
    value = parse_number(point.get("value"))
    if timestamp is None or value is None or value == no_data:
        return None
    return TelemetrySample(timestamp=timestamp, value=value)


async def fetch_usgs_result(client: USGSClient, station: StationRef) -> SourceResult:
    """
    Fetch a USGS station and normalize it into a SourceResult.

    Discharge passes through in cubic feet per second; water temperature is
    converted from Celsius to Fahrenheit. Upstream failures are logged and
    returned as a FAILED result, never raised.
    """
    parameters = station.parameters or (DISCHARGE,)
    try:
        series = await client.get_instantaneous_values(
            station.station_id, parameters, station.lookback_days
        )
    except UpstreamError as e:
        logger.warning(f"USGS fetch failed for site {station.station_id}: {e}")
        return SourceResult.failed(SourceKind.USGS, station.station_id, str(e))

    flow = series.get(DISCHARGE, [])
    temperature_f = [
        TelemetrySample(timestamp=sample.timestamp, value=celsius_to_f(sample.value))
        for sample in series.get(WATER_TEMPERATURE, [])
    ]

    missing = [code for code in parameters if not series.get(code)]
    if missing:
        logger.info(
            f"USGS site {station.station_id} returned no data for {', '.join(missing)}"
        )
    status = SourceStatus.PARTIAL if missing else SourceStatus.OK

    return SourceResult(
        source=SourceKind.USGS,
        station_id=station.station_id,
        status=status,
        flow=flow,
        temperature_f=temperature_f,
    )
