"""
Duo Admin Python SDK - Credentials Module

Session credential store, secret value holder and encrypted credential
file storage.
"""

from .types import (
    SecretValue,
    Credentials,
    normalize_host,
)

from .storage import (
    CredentialFileStorage,
    StorageMetadata,
    get_default_file_storage,
    get_default_credential_path,
    get_default_storage_dir,
)

from .store import CredentialStore

__all__ = [
    'SecretValue',
    'Credentials',
    'normalize_host',
    'CredentialFileStorage',
    'StorageMetadata',
    'get_default_file_storage',
    'get_default_credential_path',
    'get_default_storage_dir',
    'CredentialStore',
]
