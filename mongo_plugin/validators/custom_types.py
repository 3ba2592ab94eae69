"""
Custom Pydantic types and validators for MongoDB plugin settings.

Provides the Duration type, which accepts timedelta values, plain numbers
of seconds, or compact duration strings such as "10s", "5m" or "1h30m".
"""

import math
import re
from datetime import timedelta
from typing import Annotated, Any

from pydantic import BeforeValidator
from pydantic_core import PydanticCustomError

# Unit suffix -> seconds
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_FULL = re.compile(r"^(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|ms|s|m|h))+$")


def parse_duration(value: Any) -> timedelta:
    """
    Convert a duration value to timedelta.

    Accepts:
    - timedelta instances (returned unchanged)
    - int/float seconds
    - numeric strings ("30") as seconds
    - unit strings ("10s", "5m", "1h30m", "250ms"); "0" is zero

    Raises:
        PydanticCustomError: for negative, malformed or unsupported values
    """
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, bool):
        raise PydanticCustomError(
            "duration_type",
            "Duration must be a timedelta, number or duration string, got {type}",
            {"type": type(value).__name__},
        )
    elif isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise PydanticCustomError("duration_empty", "Duration cannot be empty string")
        try:
            seconds = float(text)
        except ValueError:
            if not _DURATION_FULL.match(text):
                raise PydanticCustomError(
                    "duration_invalid",
                    "Invalid duration format: {value}",
                    {"value": value},
                ) from None
            seconds = sum(
                float(amount) * _DURATION_UNITS[unit]
                for amount, unit in _DURATION_PART.findall(text)
            )
    else:
        raise PydanticCustomError(
            "duration_type",
            "Duration must be a timedelta, number or duration string, got {type}",
            {"type": type(value).__name__},
        )

    if not math.isfinite(seconds) or seconds < 0:
        raise PydanticCustomError(
            "duration_out_of_range",
            "Duration must be finite and non-negative: {value}",
            {"value": value},
        )

    if isinstance(value, timedelta):
        return value
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        raise PydanticCustomError(
            "duration_out_of_range",
            "Duration exceeds the largest supported value: {value}",
            {"value": value},
        ) from None


def to_milliseconds(value: timedelta) -> int:
    """Express a duration in whole milliseconds, as the driver options expect."""
    return int(value.total_seconds() * 1000)


# Non-negative duration accepted from settings sources
Duration = Annotated[timedelta, BeforeValidator(parse_duration)]
