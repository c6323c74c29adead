"""
Encryption utilities for stored credentials.

Credential data (for example ``{"openAIApiKey": "sk-..."}``) is serialized to
JSON and encrypted with Fernet before it is written to the ``credential``
table. The Fernet key is derived from CREDENTIAL_SECRET_KEY using SHA-256.
"""

import base64
import hashlib
import json
import logging
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from assistable.node.config import Config
from assistable.node.errors import CredentialEncryptionError

LOGGER = logging.getLogger(__name__)


def _get_secret() -> str:
    secret = Config.config().get_credential_secret()
    if not secret:
        raise CredentialEncryptionError("CREDENTIAL_SECRET_KEY environment variable not set")
    return secret


def _derive_encryption_key(secret: str) -> bytes:
    """
    Derive a Fernet-compatible key from an arbitrary secret string.

    Fernet requires a 32-byte key that is URL-safe base64 encoded, so the
    secret is hashed with SHA-256 to get exactly 32 bytes.
    """
    key_bytes = hashlib.sha256(secret.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(key_bytes)


def get_encryption_key() -> bytes:
    return _derive_encryption_key(_get_secret())


def encrypt_credential_data(data: Dict[str, Any]) -> str:
    """
    Encrypt a credential data dict for database storage.

    Raises:
        CredentialEncryptionError: If the data is empty or encryption fails
    """
    if not data:
        raise CredentialEncryptionError("Cannot encrypt empty credential data")

    try:
        fernet = Fernet(get_encryption_key())
        encrypted_bytes = fernet.encrypt(json.dumps(data).encode('utf-8'))
        return encrypted_bytes.decode('utf-8')
    except CredentialEncryptionError:
        raise
    except Exception as e:
        LOGGER.error(f"Failed to encrypt credential data: {e}")
        raise CredentialEncryptionError(f"Credential encryption failed: {e}")


def decrypt_credential_data(encrypted_data: str) -> Dict[str, Any]:
    """
    Decrypt credential data read from the database.

    Raises:
        CredentialEncryptionError: If decryption fails (wrong key, corrupted data, etc.)
    """
    if not encrypted_data:
        raise CredentialEncryptionError("Cannot decrypt empty credential data")

    try:
        fernet = Fernet(get_encryption_key())
        decrypted_bytes = fernet.decrypt(encrypted_data.encode('utf-8'))
        return json.loads(decrypted_bytes.decode('utf-8'))
    except CredentialEncryptionError:
        raise
    except InvalidToken:
        LOGGER.error("Invalid credential data: decryption failed - possibly wrong key or corrupted data")
        raise CredentialEncryptionError("Credential decryption failed: invalid or corrupted data")
    except Exception as e:
        LOGGER.error(f"Failed to decrypt credential data: {e}")
        raise CredentialEncryptionError(f"Credential decryption failed: {e}")


def decrypt_credential_data_safe(encrypted_data: Optional[str]) -> Dict[str, Any]:
    """Like decrypt_credential_data, but returns an empty dict for missing data."""
    if not encrypted_data:
        return {}
    return decrypt_credential_data(encrypted_data)
