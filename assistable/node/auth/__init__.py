"""
Credential protection for the OpenAI Assistant node.

Stored credentials are encrypted at rest and only decrypted when the node
needs an API key for a call.
"""

from .credential_encryption import encrypt_credential_data, decrypt_credential_data, decrypt_credential_data_safe

__all__ = ["encrypt_credential_data", "decrypt_credential_data", "decrypt_credential_data_safe"]
