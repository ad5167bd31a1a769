"""
Duo Admin Python SDK - Request Signing Module

HMAC request signing for the Admin API: canonical request construction,
signature computation and authorization header assembly.
"""

from .types import (
    HttpMethod,
    CanonicalRequest,
    SignedRequest,
    SigningErrorCodes,
    DATE_HEADER,
    AUTHORIZATION_HEADER,
    FORM_CONTENT_TYPE,
)

from .utils import (
    generate_timestamp,
    format_timestamp,
    percent_encode,
    canonicalize_params,
    validate_params,
)

from .canonical_request import (
    CanonicalRequestBuilder,
    build_canonical_request,
    build_canonical_bytes,
    parse_method,
    validate_path,
)

from .hmac_signer import (
    HmacRequestSigner,
    sign,
    build_auth_header,
    build_unsigned_request,
    sign_request,
)

# Public API exports
__all__ = [
    # Types
    'HttpMethod',
    'CanonicalRequest',
    'SignedRequest',
    'SigningErrorCodes',
    'DATE_HEADER',
    'AUTHORIZATION_HEADER',
    'FORM_CONTENT_TYPE',
    # Utilities
    'generate_timestamp',
    'format_timestamp',
    'percent_encode',
    'canonicalize_params',
    'validate_params',
    # Canonical request
    'CanonicalRequestBuilder',
    'build_canonical_request',
    'build_canonical_bytes',
    'parse_method',
    'validate_path',
    # Signing
    'HmacRequestSigner',
    'sign',
    'build_auth_header',
    'build_unsigned_request',
    'sign_request',
]
