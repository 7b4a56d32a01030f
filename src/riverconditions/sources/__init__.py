"""
Upstream telemetry source adapters.

Each adapter parses its own wire format and returns a SourceResult, so the
aggregation engine never branches on source-specific structure.
"""

from .base import BaseSourceClient
from .nwrfc import NWRFCClient, fetch_nwrfc_result, parse_bulletin, parse_discharge
from .usgs import USGSClient, fetch_usgs_result, parse_iv_response

__all__ = [
    "BaseSourceClient",
    "NWRFCClient",
    "USGSClient",
    "fetch_nwrfc_result",
    "fetch_usgs_result",
    "parse_bulletin",
    "parse_discharge",
    "parse_iv_response",
]
