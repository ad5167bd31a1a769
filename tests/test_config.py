"""
Unit tests for client configuration
"""

import json
import logging

import pytest

from duo_admin_sdk.config import (
    ClientConfig,
    configure_logging,
    load_config_from_file,
    load_credentials_from_env,
)
from duo_admin_sdk.exceptions import ValidationError


class TestClientConfig:
    """Test ClientConfig validation"""
    
    def test_defaults(self):
        """Test default transport settings"""
        config = ClientConfig()
        
        assert config.timeout == 30.0
        assert config.verify_ssl is True
        assert config.retry_attempts == 3
        assert config.malformed_response_retries == 1
        assert config.user_agent.startswith("Duo-Admin-Python-SDK/")
    
    @pytest.mark.parametrize("kwargs", [
        {"timeout": 0},
        {"timeout": -1},
        {"retry_attempts": -1},
        {"retry_backoff_factor": -0.1},
        {"malformed_response_retries": -1},
        {"user_agent": ""},
    ])
    def test_invalid_values(self, kwargs):
        """Test invalid settings are rejected"""
        with pytest.raises(ValidationError):
            ClientConfig(**kwargs)
    
    def test_from_dict(self):
        """Test building from a mapping"""
        config = ClientConfig.from_dict({"timeout": 10, "verify_ssl": False})
        assert config.timeout == 10
        assert config.verify_ssl is False
        assert ClientConfig.from_dict(config.to_dict()) == config
    
    def test_from_dict_unknown_key(self):
        """Test unknown keys are rejected"""
        with pytest.raises(ValidationError) as exc_info:
            ClientConfig.from_dict({"timeout": 10, "proxy": "http://proxy"})
        assert exc_info.value.error_code == "INVALID_CONFIG"


class TestConfigFile:
    """Test loading configuration files"""
    
    def test_load(self, tmp_path):
        """Test loading a JSON configuration file"""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"timeout": 12.5, "retry_attempts": 5}), encoding="utf-8")
        
        config = load_config_from_file(path)
        
        assert config.timeout == 12.5
        assert config.retry_attempts == 5
    
    def test_missing_file(self, tmp_path):
        """Test a missing file"""
        with pytest.raises(ValidationError) as exc_info:
            load_config_from_file(tmp_path / "missing.json")
        assert exc_info.value.error_code == "FILE_ERROR"
    
    def test_invalid_json(self, tmp_path):
        """Test a file that is not JSON"""
        path = tmp_path / "config.json"
        path.write_text("{timeout: 5", encoding="utf-8")
        
        with pytest.raises(ValidationError) as exc_info:
            load_config_from_file(path)
        assert exc_info.value.error_code == "PARSE_ERROR"
    
    def test_not_an_object(self, tmp_path):
        """Test a JSON document that is not an object"""
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        
        with pytest.raises(ValidationError) as exc_info:
            load_config_from_file(path)
        assert exc_info.value.error_code == "INVALID_FORMAT"


class TestEnvironment:
    """Test environment credential loading and logging setup"""
    
    def test_all_variables_set(self):
        """Test credentials are read when all variables are present"""
        env = {"DUO_IKEY": "DIKEY", "DUO_SKEY": "secret", "DUO_HOST": "api-1.example.com"}
        assert load_credentials_from_env(env) == {
            "integration_key": "DIKEY",
            "secret_key": "secret",
            "api_host": "api-1.example.com",
        }
    
    def test_partial_variables(self):
        """Test nothing is returned when a variable is missing"""
        assert load_credentials_from_env({"DUO_IKEY": "DIKEY", "DUO_HOST": "h"}) is None
        assert load_credentials_from_env({}) is None
    
    def test_reads_os_environ(self, monkeypatch):
        """Test the process environment is used by default"""
        monkeypatch.setenv("DUO_IKEY", "DIKEY")
        monkeypatch.setenv("DUO_SKEY", "secret")
        monkeypatch.setenv("DUO_HOST", "api-1.example.com")
        assert load_credentials_from_env()["integration_key"] == "DIKEY"
    
    def test_configure_logging(self):
        """Test the SDK logger level is set"""
        configure_logging("debug")
        assert logging.getLogger("duo_admin_sdk").level == logging.DEBUG
        configure_logging(logging.WARNING)
        assert logging.getLogger("duo_admin_sdk").level == logging.WARNING
