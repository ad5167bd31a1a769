"""
Unit tests for credential values and the session credential store
"""

import threading

import pytest

from duo_admin_sdk.credentials import (
    CredentialStore,
    Credentials,
    SecretValue,
    normalize_host,
)
from duo_admin_sdk.exceptions import NotConfiguredError, ValidationError

IKEY = "DIWJ8X6AEYOR5OMC6TQ1"
SKEY = "Zh5eGmUq9zpfQnyUIu5OL9iWoMMv5ZNmk3zLJ4Ep"
HOST = "api-1234.example.com"


class TestSecretValue:
    """Test cases for SecretValue"""
    
    def test_reveal(self):
        """Test the secret is available through reveal()"""
        secret = SecretValue(SKEY)
        assert secret.reveal() == SKEY
        assert secret.reveal_bytes() == SKEY.encode("utf-8")
        assert len(secret) == len(SKEY)
    
    def test_masked_representations(self):
        """Test repr, str and formatting never show the secret"""
        secret = SecretValue(SKEY)
        assert SKEY not in repr(secret)
        assert SKEY not in str(secret)
        assert SKEY not in f"{secret}"
        assert "*" in repr(secret)
    
    def test_equality(self):
        """Test secrets compare by value"""
        assert SecretValue("abc") == SecretValue("abc")
        assert SecretValue("abc") != SecretValue("abd")
        assert SecretValue("abc") != "abc"
    
    def test_unhashable(self):
        """Test secrets cannot be used as dict keys"""
        with pytest.raises(TypeError):
            hash(SecretValue("abc"))
    
    def test_clear(self):
        """Test clearing wipes the value"""
        secret = SecretValue(SKEY)
        secret.clear()
        assert not secret
        assert secret.reveal() == ""
    
    def test_copy_is_independent(self):
        """Test wrapping a SecretValue copies the buffer"""
        original = SecretValue(SKEY)
        copy = SecretValue(original)
        original.clear()
        assert copy.reveal() == SKEY
    
    def test_invalid_type(self):
        """Test non-text secrets are rejected"""
        with pytest.raises(ValidationError):
            SecretValue(12345)


class TestCredentials:
    """Test cases for Credentials"""
    
    def test_create(self):
        """Test creating credentials"""
        credentials = Credentials.create(IKEY, SKEY, HOST)
        
        assert credentials.integration_key == IKEY
        assert isinstance(credentials.secret_key, SecretValue)
        assert credentials.secret_key.reveal() == SKEY
        assert credentials.api_host == HOST
        assert credentials.auxiliary_keys == {}
    
    def test_host_normalized(self):
        """Test hosts copied with a scheme or trailing slash are normalized"""
        credentials = Credentials.create(IKEY, SKEY, "https://API-1234.Example.com/")
        assert credentials.api_host == HOST
        assert normalize_host("  http://api-1234.example.com  ") == HOST
    
    @pytest.mark.parametrize("ikey,skey,host,code", [
        ("", SKEY, HOST, "INVALID_INTEGRATION_KEY"),
        ("   ", SKEY, HOST, "INVALID_INTEGRATION_KEY"),
        (IKEY, "", HOST, "INVALID_SECRET_KEY"),
        (IKEY, SKEY, "", "INVALID_API_HOST"),
        (IKEY, SKEY, "https://", "INVALID_API_HOST"),
    ])
    def test_empty_values_rejected(self, ikey, skey, host, code):
        """Test empty credential values are rejected"""
        with pytest.raises(ValidationError) as exc_info:
            Credentials.create(ikey, skey, host)
        assert exc_info.value.error_code == code
    
    def test_repr_hides_secrets(self):
        """Test repr shows the integration key but not secrets"""
        credentials = Credentials.create(IKEY, SKEY, HOST, {"dirsync": "aux-secret-value"})
        text = repr(credentials)
        
        assert IKEY in text
        assert SKEY not in text
        assert "aux-secret-value" not in text
        assert "dirsync" in text
    
    def test_with_auxiliary_key_returns_copy(self):
        """Test adding an auxiliary key leaves the original untouched"""
        credentials = Credentials.create(IKEY, SKEY, HOST)
        updated = credentials.with_auxiliary_key("dirsync", "value")
        
        assert credentials.auxiliary_keys == {}
        assert updated.auxiliary_keys["dirsync"].reveal() == "value"
        assert updated.integration_key == IKEY
    
    def test_dict_round_trip(self):
        """Test serializing and restoring credentials"""
        credentials = Credentials.create(IKEY, SKEY, HOST, {"dirsync": "value"})
        data = credentials.to_dict()
        
        assert data["secret_key"] == SKEY
        assert data["auxiliary_keys"] == {"dirsync": "value"}
        assert Credentials.from_dict(data) == credentials
    
    def test_from_dict_missing_field(self):
        """Test incomplete data is rejected"""
        with pytest.raises(ValidationError) as exc_info:
            Credentials.from_dict({"integration_key": IKEY, "api_host": HOST})
        assert exc_info.value.error_code == "INVALID_CREDENTIAL_DATA"


class TestCredentialStore:
    """Test cases for CredentialStore"""
    
    def test_get_before_initialize(self, caplog):
        """Test reading an empty store fails with a logged warning"""
        store = CredentialStore()
        
        with caplog.at_level("WARNING", logger="duo_admin_sdk"):
            with pytest.raises(NotConfiguredError) as exc_info:
                store.get()
        
        assert exc_info.value.error_code == "NOT_CONFIGURED"
        assert any(record.levelname == "WARNING" for record in caplog.records)
        assert not store.is_configured()
    
    def test_initialize_and_get(self):
        """Test initialized credentials are returned"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST)
        
        credentials = store.get()
        assert store.is_configured()
        assert credentials.integration_key == IKEY
        assert credentials.secret_key.reveal() == SKEY
    
    def test_initialize_replaces_previous(self):
        """Test initializing again replaces the whole credential set"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST, {"dirsync": "one"})
        store.initialize("DIOTHERKEY000000000", "other-secret", "api-9999.example.com")
        
        credentials = store.get()
        assert credentials.integration_key == "DIOTHERKEY000000000"
        assert credentials.api_host == "api-9999.example.com"
        assert credentials.auxiliary_keys == {}
    
    def test_initialize_logs_without_secret(self, caplog):
        """Test the secret key never reaches the log"""
        store = CredentialStore()
        with caplog.at_level("DEBUG", logger="duo_admin_sdk"):
            store.initialize(IKEY, SKEY, HOST)
            store.add_auxiliary_key("dirsync", "aux-secret-value")
        
        assert SKEY not in caplog.text
        assert "aux-secret-value" not in caplog.text
    
    def test_auxiliary_keys(self):
        """Test adding and reading auxiliary keys"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST)
        
        store.add_auxiliary_key("dirsync", "first")
        store.add_auxiliary_key("dirsync", "second")
        store.add_auxiliary_key("radius", "third")
        
        assert store.get_auxiliary_key("dirsync").reveal() == "second"
        assert store.get_auxiliary_key("radius").reveal() == "third"
        assert store.get_auxiliary_key("missing") is None
    
    def test_auxiliary_key_before_initialize(self):
        """Test auxiliary keys need initialized credentials"""
        store = CredentialStore()
        with pytest.raises(NotConfiguredError):
            store.add_auxiliary_key("dirsync", "value")
    
    def test_auxiliary_key_empty_name(self):
        """Test auxiliary key names cannot be empty"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST)
        with pytest.raises(ValidationError):
            store.add_auxiliary_key("  ", "value")
    
    def test_held_credentials_unaffected_by_update(self):
        """Test readers holding a Credentials object never see a partial update"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST)
        held = store.get()
        
        store.add_auxiliary_key("dirsync", "value")
        
        assert held.auxiliary_keys == {}
        assert "dirsync" in store.get().auxiliary_keys
    
    def test_clear(self):
        """Test clearing returns the store to the unconfigured state"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST)
        store.clear()
        
        with pytest.raises(NotConfiguredError):
            store.get()

    def test_clear_wipes_secrets(self):
        """Test clearing zeroes the secret key and auxiliary keys"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST, {"dirsync": "aux-secret-value"})
        store.add_auxiliary_key("radius", "radius-secret")
        held = store.get()

        store.clear()

        assert not held.secret_key
        assert held.secret_key.reveal() == ""
        assert all(not value for value in held.auxiliary_keys.values())
        assert set(held.auxiliary_keys) == {"dirsync", "radius"}

    def test_clear_unconfigured(self):
        """Test clearing an empty store is harmless"""
        store = CredentialStore()
        store.clear()
        assert not store.is_configured()

    def test_concurrent_auxiliary_keys(self):
        """Test concurrent writers do not lose each other's updates"""
        store = CredentialStore()
        store.initialize(IKEY, SKEY, HOST)
        
        def add_keys(worker):
            for index in range(25):
                store.add_auxiliary_key(f"key-{worker}-{index}", f"value-{worker}-{index}")
        
        threads = [threading.Thread(target=add_keys, args=(worker,)) for worker in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        
        assert len(store.get().auxiliary_keys) == 8 * 25
    
    def test_concurrent_readers_see_whole_sets(self):
        """Test readers racing with writers always see a consistent set"""
        store = CredentialStore()
        store.initialize("DIFIRST000000000000", "secret-first", "api-first.example.com")
        pairs = {
            "DIFIRST000000000000": "api-first.example.com",
            "DISECOND00000000000": "api-second.example.com",
        }
        mismatches = []
        stop = threading.Event()
        
        def read():
            while not stop.is_set():
                credentials = store.get()
                if pairs[credentials.integration_key] != credentials.api_host:
                    mismatches.append(credentials)
        
        readers = [threading.Thread(target=read) for _ in range(4)]
        for reader in readers:
            reader.start()
        
        for index in range(200):
            if index % 2:
                store.initialize("DIFIRST000000000000", "secret-first", "api-first.example.com")
            else:
                store.initialize("DISECOND00000000000", "secret-second", "api-second.example.com")
        
        stop.set()
        for reader in readers:
            reader.join()
        
        assert mismatches == []
