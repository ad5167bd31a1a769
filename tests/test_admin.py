"""
Unit tests for Admin API resource operations
"""

from unittest.mock import Mock

import pytest
import requests

from duo_admin_sdk.admin import (
    ADMINS_PAGE_SIZE,
    GROUPS_PAGE_SIZE,
    PHONES_PAGE_SIZE,
    TOKENS_PAGE_SIZE,
    USERS_PAGE_SIZE,
    AdminApi,
)
from duo_admin_sdk.credentials import CredentialStore
from duo_admin_sdk.exceptions import ApiError
from duo_admin_sdk.http_client import AdminApiClient
from duo_admin_sdk.response import ApiResult
from duo_admin_sdk.validation import (
    ValidationResult,
    combine,
    validate_bypass_code_count,
    validate_identifier,
    validate_path_segment,
    validate_user_status,
)


@pytest.fixture
def client():
    mock_client = Mock(spec=AdminApiClient)
    mock_client.request.return_value = ApiResult.success({})
    mock_client.request_all.return_value = ApiResult.success([])
    mock_client.ping.return_value = ApiResult.success({"time": 1})
    return mock_client


@pytest.fixture
def api(client):
    return AdminApi(client)


def assert_rejected(result, client):
    assert not result.ok
    assert result.error.code == ApiError.INVALID_REQUEST
    assert result.error.detail
    client.request.assert_not_called()
    client.request_all.assert_not_called()


class TestValidators:
    """Test pure input validators"""
    
    def test_identifier(self):
        """Test identifier rules"""
        assert validate_identifier("user_id", "DU123").ok
        assert not validate_identifier("user_id", "")
        assert not validate_identifier("user_id", " DU123")
        assert not validate_identifier("user_id", "DU/123")
        assert not validate_identifier("user_id", None)
    
    def test_user_status(self):
        """Test the allowed user statuses"""
        for status in ("active", "bypass", "disabled", "locked out", None):
            assert validate_user_status(status).ok
        assert not validate_user_status("deleted")
    
    def test_bypass_code_count(self):
        """Test the bypass code count range"""
        assert validate_bypass_code_count(1).ok
        assert validate_bypass_code_count(10).ok
        assert not validate_bypass_code_count(0)
        assert not validate_bypass_code_count(11)
        assert not validate_bypass_code_count("5")
        assert not validate_bypass_code_count(True)
    
    def test_path_segment(self):
        """Test path identifiers are limited to unreserved characters"""
        assert validate_path_segment("user_id", "DUJZ2U4L80HT45MQ4EOQ").ok
        assert validate_path_segment("user_id", "a-b_c.d~e").ok
        for value in ("DU?1", "DU#1", "DU%201", "DU 1", "DU/1", "é", ".", "..", "", None):
            assert not validate_path_segment("user_id", value), value

    def test_combine(self):
        """Test combining keeps every error"""
        result = combine(ValidationResult(["a"]), ValidationResult(), ValidationResult(["b"]))
        assert result.errors == ["a", "b"]
        assert result.message == "a; b"


class TestUserOperations:
    """Test user operations"""
    
    def test_list_users(self, api, client):
        """Test users are listed with their page size"""
        api.list_users()
        client.request_all.assert_called_once_with("GET", "/admin/v1/users", {}, USERS_PAGE_SIZE)
    
    def test_list_users_by_username(self, api, client):
        """Test filtering by username"""
        api.list_users(username="jdoe")
        client.request_all.assert_called_once_with(
            "GET", "/admin/v1/users", {"username": "jdoe"}, USERS_PAGE_SIZE
        )
    
    def test_get_user(self, api, client):
        """Test fetching one user"""
        api.get_user("DU123")
        client.request.assert_called_once_with("GET", "/admin/v1/users/DU123")
    
    def test_get_user_invalid_id(self, api, client):
        """Test a bad user id is rejected before any request"""
        assert_rejected(api.get_user(""), client)
        assert_rejected(api.get_user("../settings"), client)
    
    def test_create_user(self, api, client):
        """Test creating a user with optional fields"""
        api.create_user("jdoe", realname="Jane Doe", status="active")
        client.request.assert_called_once_with(
            "POST", "/admin/v1/users",
            {"username": "jdoe", "realname": "Jane Doe", "status": "active"},
        )
    
    def test_create_user_invalid_status(self, api, client):
        """Test an unknown status is rejected"""
        result = api.create_user("jdoe", status="suspended")
        assert_rejected(result, client)
        assert "status" in result.error.detail
        assert result.error.request["path"] == "/admin/v1/users"
    
    def test_create_user_unknown_field(self, api, client):
        """Test unknown fields are rejected"""
        assert_rejected(api.create_user("jdoe", shoe_size="42"), client)
    
    def test_create_user_non_string_field(self, api, client):
        """Test field values must be strings"""
        assert_rejected(api.create_user("jdoe", notes=5), client)
    
    def test_create_user_collects_all_errors(self, api, client):
        """Test every problem is reported at once"""
        result = api.create_user("", status="suspended")
        assert_rejected(result, client)
        assert "username" in result.error.detail
        assert "status" in result.error.detail
    
    def test_update_user(self, api, client):
        """Test updating a user"""
        api.update_user("DU123", status="disabled")
        client.request.assert_called_once_with("POST", "/admin/v1/users/DU123", {"status": "disabled"})
    
    def test_delete_user(self, api, client):
        """Test deleting a user"""
        api.delete_user("DU123")
        client.request.assert_called_once_with("DELETE", "/admin/v1/users/DU123")
    
    def test_create_bypass_codes(self, api, client):
        """Test generating bypass codes"""
        api.create_bypass_codes("DU123", count=5)
        client.request.assert_called_once_with(
            "POST", "/admin/v1/users/DU123/bypass_codes", {"count": "5"}
        )
    
    @pytest.mark.parametrize("count", [0, 11, -1])
    def test_create_bypass_codes_out_of_range(self, api, client, count):
        """Test the count must be between 1 and 10"""
        assert_rejected(api.create_bypass_codes("DU123", count=count), client)


class TestUnsafeIdentifiers:
    """Test identifiers that cannot be placed in a path unchanged"""

    @pytest.mark.parametrize("user_id", ["DU?1", "DU#1", "DU%1", "DU 1"])
    def test_rejected_before_request(self, api, client, user_id):
        """Test every user-path operation rejects the identifier as a value"""
        for result in (
            api.get_user(user_id),
            api.update_user(user_id, status="active"),
            api.delete_user(user_id),
            api.create_bypass_codes(user_id, count=3),
        ):
            assert_rejected(result, client)

    def test_query_character_with_real_client(self):
        """Test a '?' in a user id comes back as a failed result, not an exception"""
        store = CredentialStore()
        store.initialize("DIWJ8X6AEYOR5OMC6TQ1", "secret", "api-1234.example.com")
        session = Mock(spec=requests.Session)
        api = AdminApi(AdminApiClient(store, session=session))

        result = api.get_user("DU?1")

        assert not result.ok
        assert result.error.code == ApiError.INVALID_REQUEST
        session.request.assert_not_called()


class TestListingsAndAccount:
    """Test listing and account operations"""
    
    @pytest.mark.parametrize("operation,path,page_size", [
        ("list_groups", "/admin/v1/groups", GROUPS_PAGE_SIZE),
        ("list_phones", "/admin/v1/phones", PHONES_PAGE_SIZE),
        ("list_tokens", "/admin/v1/tokens", TOKENS_PAGE_SIZE),
        ("list_admins", "/admin/v1/admins", ADMINS_PAGE_SIZE),
    ])
    def test_listings(self, api, client, operation, path, page_size):
        """Test each listing uses its endpoint's page size"""
        getattr(api, operation)()
        client.request_all.assert_called_once_with("GET", path, page_size=page_size)
    
    def test_page_sizes(self):
        """Test the documented page size limits"""
        assert USERS_PAGE_SIZE == 300
        assert GROUPS_PAGE_SIZE == 100
        assert PHONES_PAGE_SIZE == 500
        assert TOKENS_PAGE_SIZE == 500
        assert ADMINS_PAGE_SIZE == 100
    
    def test_get_settings(self, api, client):
        """Test reading account settings"""
        api.get_settings()
        client.request.assert_called_once_with("GET", "/admin/v1/settings")
    
    def test_get_info_summary(self, api, client):
        """Test reading the account summary"""
        api.get_info_summary()
        client.request.assert_called_once_with("GET", "/admin/v1/info/summary")
    
    def test_ping(self, api, client):
        """Test ping delegates to the client"""
        assert api.ping().payload == {"time": 1}
        client.ping.assert_called_once_with()
