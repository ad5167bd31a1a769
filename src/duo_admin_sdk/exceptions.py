"""
Exception classes for Duo Admin Python SDK
"""

from typing import Optional, Dict, Any


class DuoSDKError(Exception):
    """Base exception for all Duo Admin SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class NotConfiguredError(DuoSDKError):
    """Exception raised when credentials are used before initialization"""
    
    def __init__(self, message: str = "Credentials have not been initialized",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "NOT_CONFIGURED", details)


class InvalidRequestError(DuoSDKError):
    """Exception raised for malformed method, path or parameters"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_REQUEST", details)


class ValidationError(DuoSDKError):
    """Exception raised for invalid configuration or credential values"""
    
    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class StorageError(DuoSDKError):
    """Exception raised for credential file storage errors"""
    pass


class TransportError(DuoSDKError):
    """
    Exception raised for network, TLS and timeout failures.
    
    The remote effect of the request is unknown. ``retry_safe`` is True only
    for idempotent methods (GET, DELETE).
    """
    
    def __init__(self, message: str, method: str, path: str,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "TRANSPORT_ERROR", details)
        self.method = method
        self.path = path
        self.retry_safe = method.upper() in ("GET", "DELETE")


class ApiError(DuoSDKError):
    """
    Failure classified from a response envelope.
    
    Attributes:
        code: Envelope status (e.g. "FAIL") or "MalformedResponse"
        detail: Human readable error message from the service
        http_status: HTTP status code of the response (0 if unknown)
        api_code: Numeric service error code, when the envelope carries one
        request: Method, path and params of the request that failed
    """
    
    MALFORMED_RESPONSE = "MalformedResponse"
    INVALID_REQUEST = "InvalidRequest"
    
    def __init__(
        self,
        code: str,
        detail: Optional[str] = None,
        request: Optional[Dict[str, Any]] = None,
        http_status: int = 0,
        api_code: Optional[int] = None,
    ):
        self.code = code
        self.detail = detail
        self.request = request or {}
        self.http_status = http_status
        self.api_code = api_code
        
        method = self.request.get('method', '?')
        path = self.request.get('path', '?')
        message = f"{method} {path} failed with {code}"
        if api_code is not None:
            message += f" ({api_code})"
        if detail:
            message += f": {detail}"
        
        super().__init__(message, code, {
            'http_status': http_status,
            'api_code': api_code,
            'request': self.request,
        })
    
    @property
    def is_malformed(self) -> bool:
        return self.code == self.MALFORMED_RESPONSE
    
    def __repr__(self) -> str:
        return (f"ApiError(code='{self.code}', detail={self.detail!r}, "
                f"http_status={self.http_status}, api_code={self.api_code})")
