"""
HTTP client for the Duo Admin API

This module provides the transport used by resource operations: it signs
each request with the session credentials, sends it over HTTPS and
classifies the response envelope. Resource code only supplies a method, a
path and a parameter map.
"""

import logging
from typing import Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import ClientConfig
from .credentials.store import CredentialStore
from .exceptions import InvalidRequestError, TransportError
from .pagination import fetch_all, validate_page_size
from .response import ApiResult, classify_response, request_info
from .signing.canonical_request import parse_method, validate_path
from .signing.hmac_signer import HmacRequestSigner, build_unsigned_request
from .signing.types import SignedRequest
from .signing.utils import validate_params

logger = logging.getLogger(__name__)

PING_PATH = "/auth/v2/ping"
PAGINATION_PARAMS = ("limit", "offset")

# Only idempotent calls are retried; a POST may already have taken effect
IDEMPOTENT_METHODS = frozenset(["GET", "DELETE"])
RETRY_STATUS_CODES = [429, 500, 502, 503, 504]


class AdminApiClient:
    """
    HTTP client for communicating with the Duo Admin API.
    
    Requests are synchronous and issued one at a time; listings are fetched
    page after page because each offset depends on the previous page.
    """
    
    def __init__(
        self,
        credential_store: CredentialStore,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP client.
        
        Args:
            credential_store: Session credential store shared with the caller
            config: Transport settings (defaults apply when omitted)
            session: Optional pre-built requests session
        """
        self.credential_store = credential_store
        self.config = config or ClientConfig()
        self.session = session or self._create_session()
        
        logger.info("Initialized Duo Admin API client")
    
    def _create_session(self) -> requests.Session:
        """Create HTTP session with retry logic."""
        session = requests.Session()
        
        retry_strategy = Retry(
            total=self.config.retry_attempts,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=sorted(IDEMPOTENT_METHODS),
            backoff_factor=self.config.retry_backoff_factor,
            raise_on_status=False,
        )
        
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        
        session.headers.update({
            'Accept': 'application/json',
            'User-Agent': self.config.user_agent,
        })
        
        return session
    
    def _prepare(self, method: str, path: str, params: Optional[Mapping[str, str]],
                 sign: bool, host: Optional[str] = None) -> SignedRequest:
        if sign:
            signer = HmacRequestSigner(self.credential_store.get())
            return signer.sign_request(method, path, params)
        
        if host is None:
            host = self.credential_store.get().api_host
        return build_unsigned_request(method, host, path, params)
    
    def _send(self, prepared: SignedRequest) -> requests.Response:
        """
        Send a prepared request.
        
        Raises:
            TransportError: On network, TLS or timeout failures
        """
        method, path = prepared.method, prepared.path
        try:
            logger.debug(f"Sending {method} request to {path}")
            return self.session.request(
                method,
                prepared.url,
                headers=prepared.headers,
                data=prepared.body,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.exceptions.Timeout:
            raise TransportError(
                f"{method} {path} timed out after {self.config.timeout} seconds; "
                f"the remote effect is unknown",
                method, path
            )
        except requests.exceptions.SSLError as e:
            raise TransportError(f"{method} {path} TLS error: {e}", method, path)
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"{method} {path} connection error: {e}", method, path)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {path} request failed: {e}", method, path)
    
    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        sign: bool = True,
        host: Optional[str] = None,
    ) -> ApiResult:
        """
        Issue a single request and classify the response.
        
        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Request path without query string
            params: Request parameters
            sign: Whether to sign the request (False for exempt endpoints)
            host: Host for unsigned requests when no credentials are loaded
            
        Returns:
            ApiResult: Unwrapped payload or classified failure
            
        Raises:
            NotConfiguredError: If signing is requested without credentials
            InvalidRequestError: If method, path or params are malformed
            TransportError: On network failures
        """
        http_method = parse_method(method).value
        clean_path = validate_path(path)
        validate_params(params)
        info = request_info(http_method, clean_path, params)
        
        attempts = 1
        if http_method in IDEMPOTENT_METHODS:
            attempts += self.config.malformed_response_retries
        
        result = None
        for attempt in range(attempts):
            # Each attempt carries a fresh date header and signature
            prepared = self._prepare(http_method, clean_path, params, sign, host)
            response = self._send(prepared)
            result = classify_response(response, info)
            
            if result.ok or not result.error.is_malformed:
                return result
            
            if attempt + 1 < attempts:
                logger.warning(f"Retrying {http_method} {clean_path} after malformed response")
        
        return result
    
    def request_all(
        self,
        method: str,
        path: str,
        base_params: Optional[Mapping[str, str]] = None,
        page_size: int = 100,
    ) -> ApiResult:
        """
        Fetch every item of a paginated listing.
        
        Args:
            method: HTTP method (normally GET)
            path: Listing path
            base_params: Filters sent with every page
            page_size: Page size the endpoint supports (100, 300 or 500)
            
        Returns:
            ApiResult: Complete item list, or the error of the first failed page
        """
        http_method = parse_method(method).value
        clean_path = validate_path(path)
        validate_page_size(page_size)
        validate_params(base_params)
        base = dict(base_params or {})
        
        reserved = [name for name in PAGINATION_PARAMS if name in base]
        if reserved:
            raise InvalidRequestError(
                f"Pagination parameters are managed by request_all: {', '.join(reserved)}",
                {"params": reserved}
            )
        
        def issue_one(offset: int) -> ApiResult:
            params = dict(base)
            params['limit'] = str(page_size)
            params['offset'] = str(offset)
            return self.request(http_method, clean_path, params)
        
        return fetch_all(issue_one, page_size, request_info(http_method, clean_path, base))
    
    def ping(self, host: Optional[str] = None) -> ApiResult:
        """
        Check service liveness without authentication.
        
        Args:
            host: API host (defaults to the configured credentials' host)
        """
        return self.request('GET', PING_PATH, sign=False, host=host)
    
    def close(self):
        """Close the HTTP session."""
        if hasattr(self, 'session'):
            self.session.close()
            logger.debug("HTTP session closed")
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_client(
    integration_key: str,
    secret_key: str,
    api_host: str,
    timeout: float = 30.0,
    verify_ssl: bool = True,
    retry_attempts: int = 3,
) -> AdminApiClient:
    """
    Create an Admin API client with freshly initialized credentials.
    
    Args:
        integration_key: Integration key
        secret_key: Secret key
        api_host: API hostname
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify SSL certificates
        retry_attempts: Number of retry attempts for idempotent requests
        
    Returns:
        AdminApiClient: Configured HTTP client
    """
    store = CredentialStore()
    store.initialize(integration_key, secret_key, api_host)
    config = ClientConfig(
        timeout=timeout,
        verify_ssl=verify_ssl,
        retry_attempts=retry_attempts,
    )
    return AdminApiClient(store, config)
