"""
Admin API resource operations

Each operation picks a verb, a path and a parameter map and hands them to
the client. Inputs are validated first; a validation failure comes back as
a failed ``ApiResult`` without any request being sent.
"""

import logging
from typing import Dict, Optional

from .exceptions import ApiError
from .http_client import AdminApiClient
from .response import ApiResult, request_info
from .validation import (
    ValidationResult,
    combine,
    validate_bypass_code_count,
    validate_identifier,
    validate_path_segment,
    validate_string_fields,
    validate_user_status,
)

logger = logging.getLogger(__name__)

# Maximum page sizes accepted by each listing endpoint
USERS_PAGE_SIZE = 300
GROUPS_PAGE_SIZE = 100
PHONES_PAGE_SIZE = 500
TOKENS_PAGE_SIZE = 500
ADMINS_PAGE_SIZE = 100

USER_FIELDS = ("alias1", "alias2", "alias3", "alias4", "realname", "email",
               "status", "notes", "firstname", "lastname")


class AdminApi:
    """Representative Admin API operations built on ``AdminApiClient``."""
    
    def __init__(self, client: AdminApiClient):
        self.client = client
    
    def _rejected(self, method: str, path: str, params: Dict[str, str],
                  validation: ValidationResult) -> ApiResult:
        logger.debug(f"Rejected {method} {path}: {validation.message}")
        return ApiResult.failure(ApiError(
            ApiError.INVALID_REQUEST,
            detail=validation.message,
            request=request_info(method, path, params),
        ))
    
    def _user_fields(self, fields: Dict[str, str]) -> ValidationResult:
        unknown = sorted(set(fields) - set(USER_FIELDS))
        if unknown:
            return ValidationResult([f"unknown user fields: {', '.join(unknown)}"])
        return combine(validate_string_fields(fields), validate_user_status(fields.get("status")))
    
    # Users
    
    def list_users(self, username: Optional[str] = None) -> ApiResult:
        params = {}
        if username is not None:
            validation = validate_identifier("username", username)
            if not validation:
                return self._rejected("GET", "/admin/v1/users", {"username": str(username)}, validation)
            params["username"] = username
        return self.client.request_all("GET", "/admin/v1/users", params, USERS_PAGE_SIZE)
    
    def get_user(self, user_id: str) -> ApiResult:
        validation = validate_path_segment("user_id", user_id)
        if not validation:
            return self._rejected("GET", "/admin/v1/users/{user_id}", {}, validation)
        return self.client.request("GET", f"/admin/v1/users/{user_id}")
    
    def create_user(self, username: str, **fields: str) -> ApiResult:
        """
        Create a user.
        
        Not idempotent: after a TransportError the user may or may not exist,
        so look it up with ``list_users(username=...)`` before retrying.
        """
        validation = combine(validate_identifier("username", username), self._user_fields(fields))
        params = dict(fields, username=username) if isinstance(username, str) else dict(fields)
        if not validation:
            return self._rejected("POST", "/admin/v1/users", params, validation)
        return self.client.request("POST", "/admin/v1/users", params)
    
    def update_user(self, user_id: str, **fields: str) -> ApiResult:
        validation = combine(validate_path_segment("user_id", user_id), self._user_fields(fields))
        if not validation:
            return self._rejected("POST", "/admin/v1/users/{user_id}", dict(fields), validation)
        return self.client.request("POST", f"/admin/v1/users/{user_id}", fields)
    
    def delete_user(self, user_id: str) -> ApiResult:
        validation = validate_path_segment("user_id", user_id)
        if not validation:
            return self._rejected("DELETE", "/admin/v1/users/{user_id}", {}, validation)
        return self.client.request("DELETE", f"/admin/v1/users/{user_id}")
    
    def create_bypass_codes(self, user_id: str, count: int = 10) -> ApiResult:
        validation = combine(
            validate_path_segment("user_id", user_id),
            validate_bypass_code_count(count),
        )
        if not validation:
            return self._rejected("POST", "/admin/v1/users/{user_id}/bypass_codes",
                                  {"count": str(count)}, validation)
        return self.client.request(
            "POST", f"/admin/v1/users/{user_id}/bypass_codes", {"count": str(count)}
        )
    
    # Listings
    
    def list_groups(self) -> ApiResult:
        return self.client.request_all("GET", "/admin/v1/groups", page_size=GROUPS_PAGE_SIZE)
    
    def list_phones(self) -> ApiResult:
        return self.client.request_all("GET", "/admin/v1/phones", page_size=PHONES_PAGE_SIZE)
    
    def list_tokens(self) -> ApiResult:
        return self.client.request_all("GET", "/admin/v1/tokens", page_size=TOKENS_PAGE_SIZE)
    
    def list_admins(self) -> ApiResult:
        return self.client.request_all("GET", "/admin/v1/admins", page_size=ADMINS_PAGE_SIZE)
    
    # Account
    
    def get_settings(self) -> ApiResult:
        return self.client.request("GET", "/admin/v1/settings")
    
    def get_info_summary(self) -> ApiResult:
        return self.client.request("GET", "/admin/v1/info/summary")
    
    def ping(self) -> ApiResult:
        return self.client.ping()
