"""
Canonical request construction for Duo Admin API signatures

Both the client and the service compute this representation independently;
any difference in ordering, case or encoding produces an authentication
failure rather than a visible error.
"""

import logging
from typing import Mapping, Optional

from ..exceptions import InvalidRequestError
from .types import CanonicalRequest, HttpMethod, SigningErrorCodes
from .utils import (
    TimestampInput,
    canonicalize_params,
    format_timestamp,
)

logger = logging.getLogger(__name__)


def parse_method(method) -> HttpMethod:
    """
    Parse an HTTP method name.
    
    Raises:
        InvalidRequestError: If the method is not GET, POST, PUT or DELETE
    """
    if isinstance(method, HttpMethod):
        return method
    
    if not isinstance(method, str):
        raise InvalidRequestError(
            f"HTTP method must be a string, got {type(method).__name__}",
            {"code": SigningErrorCodes.INVALID_METHOD}
        )
    
    try:
        return HttpMethod(method.strip().upper())
    except ValueError:
        raise InvalidRequestError(
            f"Unsupported HTTP method: {method!r}",
            {"code": SigningErrorCodes.INVALID_METHOD, "method": method}
        )


def validate_path(path) -> str:
    """
    Validate a request path and return it stripped of surrounding whitespace.
    
    Raises:
        InvalidRequestError: If the path is empty, relative or carries a query string
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidRequestError(
            "Request path cannot be empty",
            {"code": SigningErrorCodes.INVALID_PATH}
        )
    
    value = path.strip()
    if not value.startswith("/"):
        raise InvalidRequestError(
            f"Request path must start with '/': {value}",
            {"code": SigningErrorCodes.INVALID_PATH, "path": value}
        )
    
    if "?" in value:
        raise InvalidRequestError(
            f"Request path must not include a query string: {value}",
            {"code": SigningErrorCodes.INVALID_PATH, "path": value}
        )
    
    return value


class CanonicalRequestBuilder:
    """
    Canonical request builder
    
    Holds the host the requests are addressed to so that resource code only
    supplies method, path and parameters.
    """
    
    def __init__(self, host: str):
        """
        Initialize canonical request builder.
        
        Args:
            host: API host the signed requests are sent to
        """
        if not isinstance(host, str) or not host.strip():
            raise InvalidRequestError(
                "API host cannot be empty",
                {"code": SigningErrorCodes.INVALID_HOST}
            )
        self.host = host.strip().lower()
    
    def build(
        self,
        method,
        path: str,
        timestamp: TimestampInput = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> CanonicalRequest:
        """
        Build the canonical request.
        
        Args:
            method: HTTP method (case-insensitive)
            path: Request path without query string
            timestamp: Time of the request, see ``format_timestamp``
            params: Request parameters
            
        Returns:
            CanonicalRequest: The five canonical components
            
        Raises:
            InvalidRequestError: If any component is malformed
        """
        http_method = parse_method(method)
        clean_path = validate_path(path)
        
        canonical = CanonicalRequest(
            timestamp=format_timestamp(timestamp).strip(),
            method=http_method.value,
            host=self.host,
            path=clean_path,
            query_string=canonicalize_params(params).strip(),
        )
        
        logger.debug(f"Built canonical request for {canonical.method} {canonical.path}")
        return canonical


def build_canonical_request(
    method,
    host: str,
    path: str,
    timestamp: TimestampInput = None,
    params: Optional[Mapping[str, str]] = None,
) -> CanonicalRequest:
    """
    Build the canonical request for the given components.
    
    Args:
        method: HTTP method
        host: API host
        path: Request path
        timestamp: Time of the request
        params: Request parameters
        
    Returns:
        CanonicalRequest: Canonical request components
    """
    return CanonicalRequestBuilder(host).build(method, path, timestamp, params)


def build_canonical_bytes(
    method,
    host: str,
    path: str,
    timestamp: TimestampInput = None,
    params: Optional[Mapping[str, str]] = None,
) -> bytes:
    """
    Build the exact UTF-8 byte sequence that is signed.
    
    Example:
        >>> build_canonical_bytes("GET", "API-1234.example.com", "/admin/v1/users",
        ...                       "Tue, 01 Jan 2030 00:00:00 -0000",
        ...                       {"offset": "0", "limit": "300"})
        b'Tue, 01 Jan 2030 00:00:00 -0000\\nGET\\napi-1234.example.com\\n/admin/v1/users\\nlimit=300&offset=0'
    """
    return build_canonical_request(method, host, path, timestamp, params).to_bytes()
