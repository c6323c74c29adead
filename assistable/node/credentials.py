import logging
from typing import Any, Dict, Optional
from assistable.node.auth.credential_encryption import decrypt_credential_data_safe
from assistable.node.interface import NodeData
from assistable.node.providers.metadata import Metadata

LOGGER = logging.getLogger(__name__)


def get_credential_data(credential_id: str, metadata: Metadata) -> Dict[str, Any]:
    """
    Load and decrypt the data of a stored credential.
    Returns an empty dict when no credential id is given or no record exists.
    """
    if not credential_id:
        return {}
    credential = metadata.get_credential(credential_id)
    if credential is None:
        LOGGER.warning(f"Credential {credential_id} not found")
        return {}
    return decrypt_credential_data_safe(credential.encrypted_data)


def get_credential_param(param_name: str, credential_data: Dict[str, Any],
                         node_data: Optional[NodeData] = None) -> Optional[str]:
    """
    Look up a parameter in the decrypted credential data first and in the node inputs second.
    Empty values count as missing.
    """
    value = credential_data.get(param_name)
    if value:
        return value
    if node_data is not None:
        value = node_data.inputs.get(param_name)
        if value:
            return value
    return None
