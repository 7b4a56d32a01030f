"""
NWRFC hydrological bulletin (XML) telemetry adapter.

Response shape (abridged)::

    <HydroMetData>
      <SiteData>
        <observedData>
          <observedValue>
            <dataDateTime>2024-05-01T10:00:00-07:00</dataDateTime>
            <discharge units="cfs">4512.5</discharge>
          </observedValue>
          ...

The discharge element may be bare text or carry attributes alongside its
text; both are read the same way.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Iterator, List, Optional, Union

import httpx

from ..config import UpstreamConfig
from ..exceptions import UpstreamError, UpstreamQueryError
from ..models import SourceKind, SourceResult, SourceStatus, StationRef, TelemetrySample
from ..parsing import parse_number, parse_timestamp, round_half_up
from .base import BaseSourceClient

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 2


def _local_name(tag: str) -> str:
    """Strip any '{namespace}' prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _children(element: Optional[ET.Element], name: str) -> Iterator[ET.Element]:
    if element is None:
        return iter(())
    return (child for child in element if _local_name(child.tag) == name)


def _first_child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    return next(_children(element, name), None)


class NWRFCClient(BaseSourceClient):
    """Client for the NOAA Northwest River Forecast Center XML feed."""

    SERVICE_NAME = "NWRFC"
    ACCEPT = "application/xml, text/xml"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        config: Optional[UpstreamConfig] = None,
    ):
        config = config or UpstreamConfig()
        super().__init__(
            base_url or config.nwrfc_url,
            timeout=timeout,
            http_client=http_client,
            config=config,
        )

    async def get_observed_discharge(
        self, station_id: str, num_days: int = DEFAULT_LOOKBACK_DAYS
    ) -> List[TelemetrySample]:
        """
        Get observed discharge for a forecast point.

        Args:
            station_id: NWRFC location id (e.g., 'EUGO3')
            num_days: Number of days of observations to request

        Returns:
            Samples sorted by time, values rounded to whole cubic feet per second
        """
        params = {
            "id": station_id,
            "pe": "HG",
            "dtype": "b",
            "numdays": str(num_days),
        }
        response = await self._get(params)

        try:
            return parse_bulletin(response.content)
        except ET.ParseError as e:
            raise UpstreamQueryError(f"Invalid XML response: {e}") from e


def parse_bulletin(xml_data: Union[str, bytes]) -> List[TelemetrySample]:
    """
    Extract discharge samples from a HydroMetData document.

    Raw bytes are preferred so the parser honours the document's own
    encoding declaration.
    """
    root = ET.fromstring(xml_data)
    site_data = root if _local_name(root.tag) == "SiteData" else _first_child(root, "SiteData")
    observed = _first_child(site_data, "observedData")
    nodes = list(_children(observed, "observedValue"))

    samples = [
        sample
        for sample in (_parse_observation(node) for node in nodes)
        if sample is not None
    ]
    if len(samples) < len(nodes):
        logger.debug(f"Dropped {len(nodes) - len(samples)} malformed NWRFC observations")

    samples.sort(key=lambda sample: sample.timestamp)
    return samples


def _parse_observation(node: ET.Element) -> Optional[TelemetrySample]:
    timestamp = parse_timestamp(_first_child(node, "dataDateTime"))
    discharge = parse_discharge(_first_child(node, "discharge"))
    if timestamp is None or discharge is None:
        return None
    return TelemetrySample(timestamp=timestamp, value=discharge)


def parse_discharge(raw: Any) -> Optional[int]:
    """
    Coerce a discharge field to whole cubic feet per second.

    ``raw`` may be a bare string, an XML element (with or without
    attributes) or a wrapped value container such as
    ``{"_": "812.5", "units": "cfs"}``.
    """
    value = parse_number(raw)
    return None if value is None else round_half_up(value)


async def fetch_nwrfc_result(client: NWRFCClient, station: StationRef) -> SourceResult:
    """
    Fetch an NWRFC station and normalize it into a SourceResult.

    Upstream failures are logged and returned as a FAILED result, never raised.
    """
    num_days = station.lookback_days or DEFAULT_LOOKBACK_DAYS
    try:
        flow = await client.get_observed_discharge(station.station_id, num_days)
    except UpstreamError as e:
        logger.warning(f"NWRFC fetch failed for {station.station_id}: {e}")
        return SourceResult.failed(SourceKind.NWRFC, station.station_id, str(e))

    if not flow:
        logger.info(f"NWRFC returned no discharge observations for {station.station_id}")

    return SourceResult(
        source=SourceKind.NWRFC,
        station_id=station.station_id,
        status=SourceStatus.OK if flow else SourceStatus.PARTIAL,
        flow=flow,
    )
