"""
Response classification for the Duo Admin API

Every API response is wrapped in an envelope carrying a status next to the
payload. A non-OK status is an expected outcome and is returned as a value;
only ``ApiResult.unwrap()`` turns it into a raised ``ApiError``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .exceptions import ApiError

logger = logging.getLogger(__name__)

STATUS_OK = "OK"

# The service names the status field "stat"; "status" is accepted as well
STATUS_FIELDS = ("stat", "status")
PAYLOAD_FIELD = "response"


@dataclass
class ApiResult:
    """
    Outcome of an API call
    
    Attributes:
        ok: True when the envelope status was OK
        payload: Unwrapped response payload (meaningful only when ok)
        error: Classified failure (set only when not ok)
        metadata: Envelope metadata such as paging information, if present
    """
    ok: bool
    payload: Any = None
    error: Optional[ApiError] = None
    metadata: Optional[Dict[str, Any]] = None
    
    @classmethod
    def success(cls, payload: Any, metadata: Optional[Dict[str, Any]] = None) -> 'ApiResult':
        return cls(ok=True, payload=payload, metadata=metadata)
    
    @classmethod
    def failure(cls, error: ApiError) -> 'ApiResult':
        return cls(ok=False, error=error)
    
    def unwrap(self) -> Any:
        """
        Return the payload or raise the classified error.
        
        Raises:
            ApiError: If the call did not succeed
        """
        if not self.ok:
            raise self.error
        return self.payload
    
    def __bool__(self) -> bool:
        return self.ok


def request_info(method: str, path: str, params: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Diagnostic description of a request attached to every ApiError."""
    return {'method': method, 'path': path, 'params': dict(params or {})}


def malformed(request: Dict[str, Any], detail: str, http_status: int = 0) -> ApiResult:
    logger.warning(f"Malformed response for {request.get('method')} {request.get('path')}: {detail}")
    return ApiResult.failure(ApiError(
        ApiError.MALFORMED_RESPONSE,
        detail=detail,
        request=request,
        http_status=http_status,
    ))


def classify_envelope(envelope: Any, request: Dict[str, Any], http_status: int = 0) -> ApiResult:
    """
    Classify a decoded response envelope.
    
    Args:
        envelope: Decoded JSON body
        request: Request description from ``request_info``
        http_status: HTTP status code of the response
        
    Returns:
        ApiResult: Unwrapped payload, or the classified failure
    """
    if not isinstance(envelope, dict):
        return malformed(request, f"expected a JSON object, got {type(envelope).__name__}", http_status)
    
    status = None
    for name in STATUS_FIELDS:
        if name in envelope:
            status = envelope[name]
            break
    
    if not isinstance(status, str) or not status:
        return malformed(request, "response envelope has no status field", http_status)
    
    if status == STATUS_OK:
        if PAYLOAD_FIELD not in envelope:
            return malformed(request, "OK response envelope has no payload", http_status)
        return ApiResult.success(envelope[PAYLOAD_FIELD], envelope.get('metadata'))
    
    detail = envelope.get('message')
    message_detail = envelope.get('message_detail')
    if detail and message_detail:
        detail = f"{detail}: {message_detail}"
    elif message_detail:
        detail = message_detail
    
    api_code = envelope.get('code')
    if not isinstance(api_code, int) or isinstance(api_code, bool):
        api_code = None
    
    error = ApiError(
        status,
        detail=detail,
        request=request,
        http_status=http_status,
        api_code=api_code,
    )
    logger.debug(f"Classified failure: {error}")
    return ApiResult.failure(error)


def classify_response(response, request: Dict[str, Any]) -> ApiResult:
    """
    Classify a raw HTTP response.
    
    Args:
        response: ``requests.Response`` (anything with ``json()`` and
            ``status_code``)
        request: Request description from ``request_info``
        
    Returns:
        ApiResult: Unwrapped payload, or the classified failure
    """
    http_status = getattr(response, 'status_code', 0) or 0
    try:
        envelope = response.json()
    except ValueError as e:
        return malformed(request, f"response body is not JSON ({e})", http_status)
    
    return classify_envelope(envelope, request, http_status)
