"""
Exceptions for river conditions operations.
"""


class RiverConditionsError(Exception):
    """Base exception for riverconditions errors."""

    pass


class UpstreamError(RiverConditionsError):
    """Base exception for failures talking to an upstream telemetry source."""

    pass


class UpstreamConnectionError(UpstreamError):
    """Error connecting to an upstream service (network, timeout, HTTP status)."""

    pass


class UpstreamQueryError(UpstreamError):
    """Error in an upstream query or response parsing."""

    pass


class ConfigurationError(RiverConditionsError):
    """A required setting (such as an API key) is missing or invalid."""

    pass


class UnknownRiverError(RiverConditionsError):
    """No river profile is registered for the requested identifier."""

    pass
