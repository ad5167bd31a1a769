"""
Configuration management for Duo Admin Python SDK

Client transport settings, JSON configuration files and environment
variable credential loading.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import ValidationError
from .version import __version__

ENV_INTEGRATION_KEY = "DUO_IKEY"
ENV_SECRET_KEY = "DUO_SKEY"
ENV_API_HOST = "DUO_HOST"

DEFAULT_USER_AGENT = f"Duo-Admin-Python-SDK/{__version__}"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class ClientConfig:
    """Configuration for Admin API transport."""
    timeout: float = 30.0
    verify_ssl: bool = True
    retry_attempts: int = 3
    retry_backoff_factor: float = 0.3
    malformed_response_retries: int = 1
    user_agent: str = DEFAULT_USER_AGENT
    
    def __post_init__(self):
        """Validate client configuration."""
        if not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ValidationError("Timeout must be positive")
        
        if not isinstance(self.retry_attempts, int) or self.retry_attempts < 0:
            raise ValidationError("Retry attempts must be non-negative")
        
        if self.retry_backoff_factor < 0:
            raise ValidationError("Retry backoff factor must be non-negative")
        
        if not isinstance(self.malformed_response_retries, int) or self.malformed_response_retries < 0:
            raise ValidationError("Malformed response retries must be non-negative")
        
        if not self.user_agent:
            raise ValidationError("User agent cannot be empty")
    
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientConfig':
        """Build configuration from a mapping, rejecting unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                "INVALID_CONFIG",
                {"unknown_keys": unknown}
            )
        return cls(**dict(data))
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config_from_file(file_path: Union[str, Path]) -> ClientConfig:
    """
    Load client configuration from a JSON file.
    
    Args:
        file_path: Path to a JSON object with ClientConfig fields
        
    Returns:
        ClientConfig: Parsed configuration
        
    Raises:
        ValidationError: If the file cannot be read or is invalid
    """
    try:
        with open(Path(file_path), 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ValidationError(f"Failed to read configuration file: {e}", "FILE_ERROR")
    except json.JSONDecodeError as e:
        raise ValidationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")
    
    if not isinstance(data, dict):
        raise ValidationError("Configuration file must contain a JSON object", "INVALID_FORMAT")
    
    return ClientConfig.from_dict(data)


def load_credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> Optional[Dict[str, str]]:
    """
    Read integration credentials from environment variables.
    
    Returns:
        dict: ``integration_key``, ``secret_key`` and ``api_host`` when all
            three variables are set, otherwise None
    """
    env = os.environ if environ is None else environ
    values = {
        'integration_key': env.get(ENV_INTEGRATION_KEY, ''),
        'secret_key': env.get(ENV_SECRET_KEY, ''),
        'api_host': env.get(ENV_API_HOST, ''),
    }
    if not all(values.values()):
        return None
    return values


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Attach a basic stderr handler to the SDK logger."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    
    sdk_logger = logging.getLogger("duo_admin_sdk")
    if not sdk_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        sdk_logger.addHandler(handler)
    sdk_logger.setLevel(level)
