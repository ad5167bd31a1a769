"""
Credential store for Duo Admin Python SDK

Holds the active integration credentials for a client session. Writers are
serialized by a lock and always swap in a complete new ``Credentials``
object, so lock-free readers see either the old set or the new one, never a
mixture.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from ..exceptions import NotConfiguredError
from .storage import (
    CredentialFileStorage,
    StorageMetadata,
    get_default_credential_path,
    get_default_file_storage,
)
from .types import Credentials, SecretValue

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Session credential store
    
    Created once per session and shared by reference with the components
    that issue requests.
    """
    
    def __init__(self, file_storage: Optional[CredentialFileStorage] = None):
        """
        Initialize an empty credential store
        
        Args:
            file_storage: Storage used by ``persist``/``load`` (optional)
        """
        self.file_storage = file_storage or get_default_file_storage()
        self._lock = threading.Lock()
        self._credentials: Optional[Credentials] = None
    
    def initialize(
        self,
        integration_key: str,
        secret_key: Union[str, SecretValue],
        api_host: str,
        auxiliary_keys: Optional[Dict[str, Union[str, SecretValue]]] = None,
    ) -> Credentials:
        """
        Install credentials for the session, replacing any previous set.
        
        Args:
            integration_key: Integration key
            secret_key: Secret key
            api_host: API hostname
            auxiliary_keys: Optional named secrets, e.g. directory sync keys
            
        Returns:
            Credentials: The installed credentials
            
        Raises:
            ValidationError: If any value is empty
        """
        credentials = Credentials.create(integration_key, secret_key, api_host, auxiliary_keys)
        self.set_credentials(credentials)
        return credentials
    
    def set_credentials(self, credentials: Credentials) -> None:
        with self._lock:
            self._credentials = credentials
        logger.info(
            f"Credentials initialized for integration {credentials.integration_key} "
            f"on {credentials.api_host}"
        )
    
    def get(self) -> Credentials:
        """
        Get the active credentials.
        
        Raises:
            NotConfiguredError: If the store was never initialized
        """
        credentials = self._credentials
        if credentials is None:
            logger.warning("Credentials requested before initialization; call initialize() or load() first")
            raise NotConfiguredError(
                "Credentials have not been initialized; call initialize() or load() first"
            )
        return credentials
    
    def is_configured(self) -> bool:
        return self._credentials is not None
    
    def add_auxiliary_key(self, name: str, value: Union[str, SecretValue]) -> None:
        """
        Add or replace a named auxiliary secret on the live credentials.
        
        Raises:
            NotConfiguredError: If the store was never initialized
            ValidationError: If the name is empty
        """
        with self._lock:
            if self._credentials is None:
                raise NotConfiguredError(
                    "Cannot add an auxiliary key before credentials are initialized"
                )
            self._credentials = self._credentials.with_auxiliary_key(name, value)
        logger.debug(f"Auxiliary key '{name}' added")
    
    def get_auxiliary_key(self, name: str) -> Optional[SecretValue]:
        return self.get().auxiliary_keys.get(name)
    
    def clear(self) -> None:
        """
        Forget the active credentials and wipe their secrets from memory.
        
        Credentials objects obtained earlier from ``get()`` are wiped too, so
        call this only once no request is in flight.
        """
        with self._lock:
            credentials, self._credentials = self._credentials, None
        if credentials is not None:
            credentials.secret_key.clear()
            for value in credentials.auxiliary_keys.values():
                value.clear()
        logger.info("Credentials cleared")
    
    def persist(self, path: Optional[Union[str, Path]] = None,
                passphrase: Optional[str] = None) -> StorageMetadata:
        """
        Write the active credentials to an encrypted file.
        
        Args:
            path: Destination (defaults to the per-user credential file)
            passphrase: Optional passphrase; the OS keyring is used when omitted
            
        Returns:
            StorageMetadata: Metadata about the written file
        """
        credentials = self.get()
        return self.file_storage.save(path or get_default_credential_path(), credentials, passphrase)
    
    def load(self, path: Optional[Union[str, Path]] = None,
             passphrase: Optional[str] = None) -> Credentials:
        """
        Read credentials from an encrypted file and make them active.
        
        Args:
            path: Credential file (defaults to the per-user credential file)
            passphrase: Passphrase the file was written with, if any
            
        Returns:
            Credentials: The loaded credentials
        """
        credentials = self.file_storage.load(path or get_default_credential_path(), passphrase)
        self.set_credentials(credentials)
        return credentials
