"""
Encrypted credential file storage for Duo Admin Python SDK

This module persists integration credentials to an encrypted JSON document
readable only by the user that wrote it. The encryption key comes either
from a passphrase (Scrypt KDF) or from a per-user master key kept in the OS
keyring.
"""

import os
import json
import getpass
import logging
import platform
import secrets
import base64
from datetime import datetime, timezone
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import keyring
from keyring.errors import KeyringError, KeyringLocked
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..exceptions import StorageError, ValidationError
from .types import Credentials

logger = logging.getLogger(__name__)

# Constants
STORAGE_SERVICE_NAME = "Duo Admin SDK"
DEFAULT_STORAGE_DIR = "duo-admin"
DEFAULT_CREDENTIAL_FILE = "credentials.json"
CREDENTIAL_FILE_PERMISSIONS = 0o600  # Owner read/write only
STORAGE_DIR_PERMISSIONS = 0o700
FILE_FORMAT_VERSION = "1.0"
SALT_LENGTH = 32
SCRYPT_N = 32768  # CPU cost factor
SCRYPT_R = 8      # Memory cost factor
SCRYPT_P = 1      # Parallelization factor

STORAGE_TYPE_PASSPHRASE = "passphrase"
STORAGE_TYPE_KEYRING = "keyring"


@dataclass
class StorageMetadata:
    """
    Metadata for a written credential file
    
    Attributes:
        path: Location of the credential file
        storage_type: Key source used ('passphrase' or 'keyring')
        created_at: Timestamp when the file was written
        algorithm: Encryption scheme used
    """
    path: str
    storage_type: str
    created_at: str
    algorithm: str


def get_default_storage_dir() -> Path:
    """Get default credential directory based on platform"""
    home = Path.home()
    
    if platform.system() == "Windows":
        appdata = os.getenv("APPDATA", str(home))
        return Path(appdata) / DEFAULT_STORAGE_DIR
    elif platform.system() == "Darwin":
        return home / "Library" / "Application Support" / DEFAULT_STORAGE_DIR
    else:
        return home / f".{DEFAULT_STORAGE_DIR}"


def get_default_credential_path() -> Path:
    return get_default_storage_dir() / DEFAULT_CREDENTIAL_FILE


class CredentialFileStorage:
    """
    Encrypted-at-rest credential file storage
    
    With a passphrase the file key is derived with Scrypt and the file can be
    opened anywhere the passphrase is known. Without one, a random master key
    is created in the OS keyring for the current user, which ties the file
    to that user on that machine.
    """
    
    def __init__(self, use_keyring: bool = True):
        """
        Initialize credential file storage
        
        Args:
            use_keyring: Whether the OS keyring may hold the master key
        """
        self.use_keyring = use_keyring
    
    def _keyring_account(self) -> str:
        return f"credential-file-key:{getpass.getuser()}"
    
    def _derive_key_from_passphrase(self, passphrase: str, salt: bytes) -> bytes:
        """Derive encryption key from passphrase using Scrypt KDF"""
        try:
            kdf = Scrypt(
                length=32,  # 256-bit key
                salt=salt,
                n=SCRYPT_N,
                r=SCRYPT_R,
                p=SCRYPT_P,
            )
            return base64.urlsafe_b64encode(kdf.derive(passphrase.encode('utf-8')))
        except Exception as e:
            raise StorageError(
                f"Key derivation failed: {e}",
                "KEY_DERIVATION_FAILED"
            )
    
    def _get_master_key(self, create: bool) -> Optional[bytes]:
        """Fetch (and optionally create) the per-user master key from the keyring"""
        account = self._keyring_account()
        try:
            stored = keyring.get_password(STORAGE_SERVICE_NAME, account)
            if stored is None and create:
                stored = Fernet.generate_key().decode('ascii')
                keyring.set_password(STORAGE_SERVICE_NAME, account, stored)
                logger.info("Created credential master key in OS keyring")
        except (KeyringError, KeyringLocked) as e:
            raise StorageError(
                f"Keyring access failed: {e}",
                "KEYRING_ACCESS_FAILED"
            )
        
        return stored.encode('ascii') if stored is not None else None
    
    def _encrypt(self, data: bytes, passphrase: Optional[str]) -> Dict[str, str]:
        """Encrypt serialized credentials"""
        if passphrase is not None:
            salt = secrets.token_bytes(SALT_LENGTH)
            fernet = Fernet(self._derive_key_from_passphrase(passphrase, salt))
            return {
                'encrypted_data': fernet.encrypt(data).decode('ascii'),
                'salt': base64.b64encode(salt).decode('ascii'),
                'algorithm': 'Scrypt-Fernet',
                'version': FILE_FORMAT_VERSION,
            }
        
        if not self.use_keyring:
            raise StorageError(
                "Passphrase required for encrypted file storage",
                "PASSPHRASE_REQUIRED"
            )
        
        fernet = Fernet(self._get_master_key(create=True))
        return {
            'encrypted_data': fernet.encrypt(data).decode('ascii'),
            'algorithm': 'Keyring-Fernet',
            'version': FILE_FORMAT_VERSION,
        }
    
    def _read_payload(self, storage_type: str, payload: Dict[str, str]):
        """Extract the ciphertext (and salt for passphrase files) from a file payload"""
        try:
            token = payload['encrypted_data'].encode('ascii')
            salt = None
            if storage_type == STORAGE_TYPE_PASSPHRASE:
                salt = base64.b64decode(payload['salt'], validate=True)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StorageError(
                f"File retrieval failed: damaged encrypted payload ({type(e).__name__})",
                "FILE_RETRIEVAL_FAILED"
            )
        return token, salt
    
    def _decrypt(self, storage_type: str, payload: Dict[str, str],
                 passphrase: Optional[str]) -> bytes:
        """Decrypt serialized credentials"""
        if storage_type == STORAGE_TYPE_PASSPHRASE:
            if passphrase is None:
                raise StorageError(
                    "Passphrase required for encrypted file storage",
                    "PASSPHRASE_REQUIRED"
                )
            token, salt = self._read_payload(storage_type, payload)
            key = self._derive_key_from_passphrase(passphrase, salt)
        elif storage_type == STORAGE_TYPE_KEYRING:
            if not self.use_keyring:
                raise StorageError(
                    "Credential file is protected by the OS keyring, which is disabled",
                    "KEYRING_DISABLED"
                )
            token, _ = self._read_payload(storage_type, payload)
            key = self._get_master_key(create=False)
            if key is None:
                raise StorageError(
                    "Credential master key not found in OS keyring",
                    "MASTER_KEY_MISSING"
                )
        else:
            raise StorageError(
                f"Unknown credential storage type: {storage_type}",
                "UNKNOWN_STORAGE_TYPE"
            )
        
        try:
            return Fernet(key).decrypt(token)
        except InvalidToken:
            raise StorageError(
                "Credential decryption failed: wrong passphrase or corrupted file",
                "DECRYPTION_FAILED"
            )
    
    def _ensure_parent_dir(self, file_path: Path) -> None:
        """Ensure the credential directory exists with owner-only permissions"""
        parent = file_path.parent
        if parent.exists():
            return
        try:
            parent.mkdir(parents=True, exist_ok=True)
            if platform.system() != "Windows":
                os.chmod(parent, STORAGE_DIR_PERMISSIONS)
        except OSError as e:
            raise StorageError(
                f"Failed to create storage directory: {e}",
                "STORAGE_DIR_CREATION_FAILED"
            )
    
    def save(self, path: Union[str, Path], credentials: Credentials,
             passphrase: Optional[str] = None) -> StorageMetadata:
        """
        Write credentials to an encrypted file
        
        Args:
            path: Destination file
            credentials: Credentials to persist
            passphrase: Optional passphrase; the OS keyring is used when omitted
            
        Returns:
            StorageMetadata: Metadata about the written file
            
        Raises:
            StorageError: If encryption or writing fails
        """
        file_path = Path(path).expanduser()
        self._ensure_parent_dir(file_path)
        
        storage_type = STORAGE_TYPE_PASSPHRASE if passphrase is not None else STORAGE_TYPE_KEYRING
        plaintext = json.dumps(credentials.to_dict()).encode('utf-8')
        encrypted_payload = self._encrypt(plaintext, passphrase)
        created_at = datetime.now(timezone.utc).isoformat()
        
        file_data = {
            'format_version': FILE_FORMAT_VERSION,
            'storage_type': storage_type,
            'created_at': created_at,
            'encrypted_credentials': encrypted_payload,
        }
        
        try:
            # Create with owner-only permissions so the file is never world readable
            fd = os.open(str(file_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
                         CREDENTIAL_FILE_PERMISSIONS)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(file_data, f, indent=2)
            
            if platform.system() != "Windows":
                os.chmod(file_path, CREDENTIAL_FILE_PERMISSIONS)
        except OSError as e:
            if file_path.exists():
                try:
                    file_path.unlink()
                except OSError:
                    logger.warning(f"Could not remove partial credential file: {file_path}")
            
            raise StorageError(
                f"File storage failed: {e}",
                "FILE_STORAGE_FAILED"
            )
        
        logger.info(f"Credentials persisted to {file_path} ({storage_type})")
        return StorageMetadata(
            path=str(file_path),
            storage_type=storage_type,
            created_at=created_at,
            algorithm=encrypted_payload['algorithm'],
        )
    
    def load(self, path: Union[str, Path], passphrase: Optional[str] = None) -> Credentials:
        """
        Read credentials from an encrypted file
        
        Args:
            path: Credential file
            passphrase: Passphrase the file was written with, if any
            
        Returns:
            Credentials: Decrypted credentials
            
        Raises:
            StorageError: If the file is missing, unreadable or cannot be decrypted
        """
        file_path = Path(path).expanduser()
        if not file_path.exists():
            raise StorageError(
                f"Credential file not found: {file_path}",
                "FILE_NOT_FOUND"
            )
        
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                file_data = json.load(f)
            storage_type = file_data['storage_type']
            payload = file_data['encrypted_credentials']
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(
                f"File retrieval failed: {e}",
                "FILE_RETRIEVAL_FAILED"
            )
        
        plaintext = self._decrypt(storage_type, payload, passphrase)
        
        try:
            credentials = Credentials.from_dict(json.loads(plaintext.decode('utf-8')))
        except (ValueError, ValidationError) as e:
            raise StorageError(
                f"Credential file contents are invalid: {e}",
                "INVALID_CREDENTIAL_FILE"
            )
        
        logger.info(f"Credentials loaded from {file_path}")
        return credentials
    
    def delete(self, path: Union[str, Path]) -> bool:
        """
        Delete a credential file
        
        Returns:
            bool: True if the file was deleted, False if it did not exist
        """
        file_path = Path(path).expanduser()
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except OSError as e:
            raise StorageError(
                f"File deletion failed: {e}",
                "FILE_DELETION_FAILED"
            )
    
    def check_storage_availability(self) -> Dict[str, Any]:
        """
        Check availability of key sources
        
        Returns:
            dict: Storage availability information
        """
        result = {
            'keyring_enabled': self.use_keyring,
            'passphrase_storage_available': True,
            'default_path': str(get_default_credential_path()),
            'platform': platform.system(),
        }
        
        if self.use_keyring:
            try:
                backend = keyring.get_keyring()
                result['keyring_backend'] = type(backend).__name__
                result['keyring_functional'] = getattr(backend, 'priority', 0) > 0
            except Exception as e:
                result['keyring_functional'] = False
                result['keyring_error'] = str(e)
        else:
            result['keyring_functional'] = False
        
        return result


def get_default_file_storage() -> CredentialFileStorage:
    """
    Get default credential file storage instance
    
    Returns:
        CredentialFileStorage: Default storage instance
    """
    return CredentialFileStorage()
