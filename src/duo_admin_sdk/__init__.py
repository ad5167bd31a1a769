"""
Duo Admin Python SDK
HMAC-signed client for the Duo Admin API
"""

from .version import __version__
from .exceptions import (
    DuoSDKError,
    NotConfiguredError,
    InvalidRequestError,
    ValidationError,
    StorageError,
    TransportError,
    ApiError,
)
from .credentials import (
    SecretValue,
    Credentials,
    CredentialStore,
    CredentialFileStorage,
    StorageMetadata,
    get_default_file_storage,
    get_default_credential_path,
)
from .signing import (
    HttpMethod,
    CanonicalRequest,
    SignedRequest,
    CanonicalRequestBuilder,
    HmacRequestSigner,
    build_canonical_request,
    build_canonical_bytes,
    build_auth_header,
    build_unsigned_request,
    format_timestamp,
    percent_encode,
    canonicalize_params,
    sign,
    sign_request,
    DATE_HEADER,
)
from .response import (
    ApiResult,
    classify_response,
    classify_envelope,
)
from .pagination import (
    PaginatedFetcher,
    fetch_all,
)
from .validation import ValidationResult
from .config import (
    ClientConfig,
    load_config_from_file,
    load_credentials_from_env,
    configure_logging,
)
from .http_client import (
    AdminApiClient,
    create_client,
)
from .admin import AdminApi


# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'DuoSDKError',
    'NotConfiguredError',
    'InvalidRequestError',
    'ValidationError',
    'StorageError',
    'TransportError',
    'ApiError',
    # Credentials
    'SecretValue',
    'Credentials',
    'CredentialStore',
    'CredentialFileStorage',
    'StorageMetadata',
    'get_default_file_storage',
    'get_default_credential_path',
    # Request Signing
    'HttpMethod',
    'CanonicalRequest',
    'SignedRequest',
    'CanonicalRequestBuilder',
    'HmacRequestSigner',
    'build_canonical_request',
    'build_canonical_bytes',
    'build_auth_header',
    'build_unsigned_request',
    'format_timestamp',
    'percent_encode',
    'canonicalize_params',
    'sign',
    'sign_request',
    'DATE_HEADER',
    # Responses and pagination
    'ApiResult',
    'classify_response',
    'classify_envelope',
    'PaginatedFetcher',
    'fetch_all',
    'ValidationResult',
    # Configuration
    'ClientConfig',
    'load_config_from_file',
    'load_credentials_from_env',
    'configure_logging',
    # HTTP Client
    'AdminApiClient',
    'create_client',
    'AdminApi',
]
