"""
Utility functions for request signing

This module provides timestamp formatting, strict percent-encoding and
parameter canonicalisation used to build the string that gets signed.
"""

import re
import time
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Mapping, Optional, Union
from urllib.parse import quote

from ..exceptions import InvalidRequestError
from .types import SigningErrorCodes


# RFC 1123 date with English names and a fixed -0000 zone
TIMESTAMP_PATTERN = re.compile(
    r'^(Mon|Tue|Wed|Thu|Fri|Sat|Sun), \d{2} '
    r'(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec) '
    r'\d{4} \d{2}:\d{2}:\d{2} -0000$'
)

# Letters, digits and "-_.~" are never escaped by quote()
UNRESERVED_SAFE = "~"

TimestampInput = Union[None, int, float, datetime, str]


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.
    
    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def format_timestamp(when: TimestampInput = None) -> str:
    """
    Format a point in time as ``Www, dd MMM yyyy HH:mm:ss -0000``.
    
    The output never depends on the host locale or timezone: day and month
    names come from the email package's fixed English tables and the time
    is always rendered in UTC.
    
    Args:
        when: None for now, a Unix timestamp, a datetime (naive values are
            taken as UTC) or an already formatted string
        
    Returns:
        str: Formatted timestamp
        
    Raises:
        InvalidRequestError: If a string does not match the expected pattern
    """
    if isinstance(when, str):
        value = when.strip()
        if not TIMESTAMP_PATTERN.match(value):
            raise InvalidRequestError(
                f"Invalid request timestamp: {when!r}",
                {"code": SigningErrorCodes.INVALID_TIMESTAMP}
            )
        return value
    
    if when is None:
        when = generate_timestamp()
    
    if isinstance(when, datetime):
        if when.tzinfo is not None:
            when = when.astimezone(timezone.utc)
        dt = when.replace(tzinfo=None, microsecond=0)
    elif isinstance(when, (int, float)) and not isinstance(when, bool):
        dt = datetime.fromtimestamp(when, timezone.utc).replace(tzinfo=None, microsecond=0)
    else:
        raise InvalidRequestError(
            f"Unsupported timestamp type: {type(when).__name__}",
            {"code": SigningErrorCodes.INVALID_TIMESTAMP}
        )
    
    # A naive datetime renders with the -0000 zone
    return format_datetime(dt)


def percent_encode(value: str) -> str:
    """
    Percent-encode a string leaving only unreserved characters as-is.
    
    Space becomes ``%20`` (never ``+``) and non-ASCII text is encoded as
    UTF-8 before escaping.
    
    Args:
        value: Text to encode
        
    Returns:
        str: Encoded text with uppercase hex escapes
    """
    return quote(value, safe=UNRESERVED_SAFE)


def validate_params(params: Optional[Mapping[str, str]]) -> None:
    """
    Check that request parameters form a string-to-string map.
    
    Raises:
        InvalidRequestError: If a key or value is not a string
    """
    if params is None:
        return
    
    if not isinstance(params, Mapping):
        raise InvalidRequestError(
            "Request parameters must be a mapping of strings",
            {"code": SigningErrorCodes.INVALID_PARAMS}
        )
    
    for key, value in params.items():
        if not isinstance(key, str) or not key:
            raise InvalidRequestError(
                f"Parameter names must be non-empty strings, got {key!r}",
                {"code": SigningErrorCodes.INVALID_PARAMS}
            )
        if not isinstance(value, str):
            raise InvalidRequestError(
                f"Parameter '{key}' must be a string, got {type(value).__name__}",
                {"code": SigningErrorCodes.INVALID_PARAMS, "param": key}
            )


def canonicalize_params(params: Optional[Mapping[str, str]]) -> str:
    """
    Build the sorted, encoded ``key=value&...`` parameter string.
    
    Keys are ordered by their UTF-8 bytes, never by locale collation.
    
    Args:
        params: Request parameters
        
    Returns:
        str: Canonical parameter string (empty if there are no parameters)
    """
    validate_params(params)
    if not params:
        return ""
    
    ordered = sorted(params.items(), key=lambda item: item[0].encode("utf-8"))
    return "&".join(
        f"{percent_encode(key)}={percent_encode(value)}" for key, value in ordered
    )

