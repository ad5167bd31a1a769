"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the Duo Admin API
HMAC request signing scheme.
"""

from typing import Dict, Optional
from dataclasses import dataclass, field
from enum import Enum


DATE_HEADER = "X-Duo-Date"
AUTHORIZATION_HEADER = "Authorization"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
API_SCHEME = "https"


class HttpMethod(str, Enum):
    """HTTP methods accepted by the Admin API"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    
    @property
    def sends_body(self) -> bool:
        """Whether parameters travel in a form-encoded body instead of the query string"""
        return self in (HttpMethod.POST, HttpMethod.PUT)


@dataclass(frozen=True)
class CanonicalRequest:
    """
    Canonical representation of a request, the only value that gets signed
    
    Attributes:
        timestamp: RFC 1123 date string with a fixed -0000 zone
        method: Uppercase HTTP method
        host: Lowercase API host
        path: Request path without query string
        query_string: Sorted, strictly percent-encoded parameters
    """
    timestamp: str
    method: str
    host: str
    path: str
    query_string: str
    
    def to_string(self) -> str:
        """Join the five components with line feeds (no trailing newline)."""
        return "\n".join([
            self.timestamp,
            self.method,
            self.host,
            self.path,
            self.query_string,
        ])
    
    def to_bytes(self) -> bytes:
        return self.to_string().encode("utf-8")


@dataclass
class SignedRequest:
    """
    Ready-to-send request descriptor
    
    Produced fresh for every call; each call carries its own timestamp and
    therefore its own signature.
    
    Attributes:
        method: Uppercase HTTP method
        url: Complete request URL (query string included for GET/DELETE)
        path: Request path, kept for diagnostics
        headers: Date and Authorization headers plus Content-Type
        body: Form-encoded parameters for POST/PUT, otherwise None
        params: Original request parameters, kept for diagnostics
        content_type: Always application/x-www-form-urlencoded
    """
    method: str
    url: str
    path: str
    headers: Dict[str, str]
    body: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)
    content_type: str = FORM_CONTENT_TYPE
    
    @property
    def signed(self) -> bool:
        return AUTHORIZATION_HEADER in self.headers
    
    def __repr__(self) -> str:
        # Authorization header carries the integration key and digest
        safe_headers = {
            name: ('<redacted>' if name == AUTHORIZATION_HEADER else value)
            for name, value in self.headers.items()
        }
        return (f"SignedRequest(method='{self.method}', url='{self.url}', "
                f"headers={safe_headers}, body={self.body!r})")


# Common signing error codes
class SigningErrorCodes:
    """Standard error codes for signing operations"""
    
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_PATH = "INVALID_PATH"
    INVALID_HOST = "INVALID_HOST"
    INVALID_PARAMS = "INVALID_PARAMS"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_SECRET = "INVALID_SECRET"
