"""
Fallible parsers for upstream values.

Every parser here returns None instead of raising when its input cannot
be coerced, so callers can drop malformed samples with a filter step.
"""

import math
from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping, Optional
from xml.etree.ElementTree import Element

# Key under which XML-to-dict converters store an element's text when the
# element also carries attributes.
WRAPPED_TEXT_KEY = "_"


def parse_number(raw: Any) -> Optional[float]:
    """
    Coerce an upstream value to a finite float.

    Accepts numbers, numeric strings, XML elements (their text is used,
    attributes are ignored) and wrapped value containers of the form
    ``{"_": "812.5", "units": "cfs"}``.
    """
    if isinstance(raw, Element):
        raw = raw.text
    elif isinstance(raw, Mapping):
        raw = raw.get(WRAPPED_TEXT_KEY)

    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None

    return value if math.isfinite(value) else None


def parse_timestamp(
    raw: Any, default_tz: tzinfo = timezone.utc
) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into a timezone-aware datetime.

    Naive timestamps are interpreted in ``default_tz``.
    """
    if isinstance(raw, Element):
        raw = raw.text
    if not isinstance(raw, str) or not raw.strip():
        return None

    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        timestamp = datetime.fromisoformat(text)
    except ValueError:
        return None

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=default_tz)
    return timestamp


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (812.5 -> 813)."""
    return math.floor(value + 0.5)


def celsius_to_f(celsius: float) -> int:
    """Convert Celsius to whole degrees Fahrenheit."""
    return round_half_up(celsius * 9 / 5 + 32)
