"""
HMAC request signer for the Duo Admin API

This module signs canonical requests with HMAC-SHA1 and assembles the
request descriptor (URL, headers, form body) that the transport sends.
SHA-1 is what the service verifies against; it cannot be swapped for a
stronger digest without every signature being rejected.
"""

import base64
import hashlib
import hmac
import logging
from typing import Mapping, Optional, Union

from ..credentials.types import Credentials, SecretValue
from ..exceptions import InvalidRequestError
from .canonical_request import CanonicalRequestBuilder, parse_method, validate_path
from .types import (
    API_SCHEME,
    AUTHORIZATION_HEADER,
    DATE_HEADER,
    FORM_CONTENT_TYPE,
    SignedRequest,
    SigningErrorCodes,
)
from .utils import TimestampInput, canonicalize_params, format_timestamp

logger = logging.getLogger(__name__)

SecretInput = Union[str, bytes, SecretValue]


def _secret_bytes(secret_key: SecretInput) -> bytes:
    if isinstance(secret_key, SecretValue):
        data = secret_key.reveal_bytes()
    elif isinstance(secret_key, str):
        data = secret_key.encode("utf-8")
    elif isinstance(secret_key, (bytes, bytearray)):
        data = bytes(secret_key)
    else:
        raise InvalidRequestError(
            "Secret key must be a string, bytes or SecretValue",
            {"code": SigningErrorCodes.INVALID_SECRET}
        )
    
    if not data:
        raise InvalidRequestError(
            "Secret key cannot be empty",
            {"code": SigningErrorCodes.INVALID_SECRET}
        )
    return data


def sign(canonical_bytes: bytes, secret_key: SecretInput) -> str:
    """
    Compute the request signature.
    
    Args:
        canonical_bytes: Canonical request bytes
        secret_key: Integration secret key
        
    Returns:
        str: Lowercase hex HMAC-SHA1 digest
    """
    if isinstance(canonical_bytes, str):
        canonical_bytes = canonical_bytes.encode("utf-8")
    return hmac.new(_secret_bytes(secret_key), canonical_bytes, hashlib.sha1).hexdigest()


def build_auth_header(integration_key: str, hex_digest: str) -> str:
    """
    Build the Authorization header value.
    
    The service expects the literal ``Basic: `` prefix (with a colon), not
    the RFC 7617 ``Basic `` form.
    
    Args:
        integration_key: Integration key
        hex_digest: Signature from ``sign``
        
    Returns:
        str: ``Basic: base64(integration_key:hex_digest)``
    """
    token = f"{integration_key}:{hex_digest}".encode("utf-8")
    return "Basic: " + base64.b64encode(token).decode("ascii")


def build_url(host: str, path: str, query_string: str = "") -> str:
    url = f"{API_SCHEME}://{host}{path}"
    if query_string:
        url += "?" + query_string
    return url


class HmacRequestSigner:
    """
    Signs Admin API requests with an integration's credentials
    
    Every call to ``sign_request`` takes a fresh timestamp, so the returned
    descriptor must not be reused for a later send.
    """
    
    def __init__(self, credentials: Credentials):
        """
        Initialize the signer.
        
        Args:
            credentials: Integration credentials
        """
        self.credentials = credentials
        self._builder = CanonicalRequestBuilder(credentials.api_host)
    
    def sign_request(
        self,
        method,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        timestamp: TimestampInput = None,
    ) -> SignedRequest:
        """
        Sign a request and build its descriptor.
        
        Args:
            method: HTTP method
            path: Request path without query string
            params: Request parameters
            timestamp: Time of the request (defaults to now)
            
        Returns:
            SignedRequest: Descriptor with date and authorization headers
            
        Raises:
            InvalidRequestError: If method, path or params are malformed
        """
        date = format_timestamp(timestamp)
        canonical = self._builder.build(method, path, date, params)
        digest = sign(canonical.to_bytes(), self.credentials.secret_key)
        
        headers = {
            DATE_HEADER: canonical.timestamp,
            AUTHORIZATION_HEADER: build_auth_header(self.credentials.integration_key, digest),
            "Content-Type": FORM_CONTENT_TYPE,
        }
        
        if parse_method(method).sends_body:
            url = build_url(canonical.host, canonical.path)
            body = canonical.query_string
        else:
            url = build_url(canonical.host, canonical.path, canonical.query_string)
            body = None
        
        logger.debug(f"Signed {canonical.method} request to {canonical.path}")
        return SignedRequest(
            method=canonical.method,
            url=url,
            path=canonical.path,
            headers=headers,
            body=body,
            params=dict(params or {}),
        )


def build_unsigned_request(
    method,
    host: str,
    path: str,
    params: Optional[Mapping[str, str]] = None,
) -> SignedRequest:
    """
    Build a request descriptor without authentication headers.
    
    Used for endpoints exempt from signing, such as the liveness check.
    """
    http_method = parse_method(method)
    clean_path = validate_path(path)
    if not isinstance(host, str) or not host.strip():
        raise InvalidRequestError(
            "API host cannot be empty",
            {"code": SigningErrorCodes.INVALID_HOST}
        )
    query_string = canonicalize_params(params)
    clean_host = host.strip().lower()
    
    if http_method.sends_body:
        url, body = build_url(clean_host, clean_path), query_string
    else:
        url, body = build_url(clean_host, clean_path, query_string), None
    
    return SignedRequest(
        method=http_method.value,
        url=url,
        path=clean_path,
        headers={"Content-Type": FORM_CONTENT_TYPE},
        body=body,
        params=dict(params or {}),
    )


def sign_request(
    credentials: Credentials,
    method,
    path: str,
    params: Optional[Mapping[str, str]] = None,
    timestamp: TimestampInput = None,
) -> SignedRequest:
    """
    Sign a request with the given credentials.
    
    Args:
        credentials: Integration credentials
        method: HTTP method
        path: Request path
        params: Request parameters
        timestamp: Time of the request
        
    Returns:
        SignedRequest: Signed request descriptor
    """
    return HmacRequestSigner(credentials).sign_request(method, path, params, timestamp)
