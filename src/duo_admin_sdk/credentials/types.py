"""
Credential types for the Duo Admin Python SDK

Secrets are held in mutable buffers that can be wiped, and are masked in
every string representation so they do not end up in logs or tracebacks.
"""

import hmac
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..exceptions import ValidationError


def normalize_host(host: str) -> str:
    """
    Normalize an API host to a bare lowercase hostname.
    
    Accepts values copied with a scheme or trailing slash, such as
    ``https://API-1234.example.com/``.
    """
    value = host.strip()
    for prefix in ("https://", "http://"):
        if value.lower().startswith(prefix):
            value = value[len(prefix):]
            break
    return value.rstrip("/").lower()


class SecretValue:
    """
    Opaque holder for a secret string
    
    The value is only available through ``reveal()``; ``repr`` and ``str``
    never show it.
    """
    
    __slots__ = ("_buffer",)
    
    def __init__(self, value: Union[str, bytes, "SecretValue"]):
        if isinstance(value, SecretValue):
            data = bytes(value._buffer)
        elif isinstance(value, str):
            data = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray)):
            data = bytes(value)
        else:
            raise ValidationError(
                f"Secret must be a string or bytes, got {type(value).__name__}",
                "INVALID_SECRET"
            )
        self._buffer = bytearray(data)
    
    def reveal(self) -> str:
        """Return the secret as plain text."""
        return self._buffer.decode("utf-8")
    
    def reveal_bytes(self) -> bytes:
        return bytes(self._buffer)
    
    def clear(self) -> None:
        """Overwrite the secret in memory."""
        for index in range(len(self._buffer)):
            self._buffer[index] = 0
        self._buffer = bytearray()
    
    def __len__(self) -> int:
        return len(self._buffer)
    
    def __bool__(self) -> bool:
        return len(self._buffer) > 0
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, SecretValue):
            return NotImplemented
        return hmac.compare_digest(bytes(self._buffer), bytes(other._buffer))
    
    def __hash__(self):
        raise TypeError("SecretValue is unhashable")
    
    def __repr__(self) -> str:
        return "SecretValue('**********')"
    
    __str__ = __repr__


@dataclass
class Credentials:
    """
    Credentials for one Admin API integration
    
    Attributes:
        integration_key: Public identifier of the API client
        secret_key: Private key used to compute request signatures
        api_host: Hostname of the API, e.g. ``api-1234abcd.duosecurity.com``
        auxiliary_keys: Caller-supplied named secrets the API cannot return,
            such as directory sync keys
    """
    integration_key: str
    secret_key: SecretValue
    api_host: str
    auxiliary_keys: Dict[str, SecretValue] = field(default_factory=dict)
    
    def __post_init__(self):
        """Validate and normalize credential values"""
        if not isinstance(self.integration_key, str) or not self.integration_key.strip():
            raise ValidationError("Integration key cannot be empty", "INVALID_INTEGRATION_KEY")
        self.integration_key = self.integration_key.strip()
        
        if not isinstance(self.secret_key, SecretValue):
            self.secret_key = SecretValue(self.secret_key)
        if not self.secret_key:
            raise ValidationError("Secret key cannot be empty", "INVALID_SECRET_KEY")
        
        if not isinstance(self.api_host, str) or not normalize_host(self.api_host):
            raise ValidationError("API host cannot be empty", "INVALID_API_HOST")
        self.api_host = normalize_host(self.api_host)
        
        self.auxiliary_keys = {
            name: value if isinstance(value, SecretValue) else SecretValue(value)
            for name, value in (self.auxiliary_keys or {}).items()
        }
    
    @classmethod
    def create(
        cls,
        integration_key: str,
        secret_key: Union[str, SecretValue],
        api_host: str,
        auxiliary_keys: Optional[Dict[str, Union[str, SecretValue]]] = None,
    ) -> 'Credentials':
        return cls(
            integration_key=integration_key,
            secret_key=SecretValue(secret_key),
            api_host=api_host,
            auxiliary_keys=dict(auxiliary_keys or {}),
        )
    
    def with_auxiliary_key(self, name: str, value: Union[str, SecretValue]) -> 'Credentials':
        """Return a copy carrying one more auxiliary key."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Auxiliary key name cannot be empty", "INVALID_AUXILIARY_KEY")
        keys = dict(self.auxiliary_keys)
        keys[name.strip()] = SecretValue(value)
        return Credentials(
            integration_key=self.integration_key,
            secret_key=self.secret_key,
            api_host=self.api_host,
            auxiliary_keys=keys,
        )
    
    def to_dict(self) -> Dict[str, object]:
        """
        Serialize credentials including secret values.
        
        Only used to build the encrypted credential file payload.
        """
        return {
            'integration_key': self.integration_key,
            'secret_key': self.secret_key.reveal(),
            'api_host': self.api_host,
            'auxiliary_keys': {
                name: value.reveal() for name, value in self.auxiliary_keys.items()
            },
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> 'Credentials':
        try:
            return cls.create(
                integration_key=data['integration_key'],
                secret_key=data['secret_key'],
                api_host=data['api_host'],
                auxiliary_keys=data.get('auxiliary_keys') or {},
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValidationError(f"Invalid credential data: {e}", "INVALID_CREDENTIAL_DATA")
    
    def __repr__(self) -> str:
        return (f"Credentials(integration_key='{self.integration_key}', "
                f"secret_key={self.secret_key!r}, api_host='{self.api_host}', "
                f"auxiliary_keys={sorted(self.auxiliary_keys)})")
