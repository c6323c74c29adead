from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from assistable.node.assistant import OpenAIAssistantNode
from assistable.node.errors import (
    AssistantNotFoundError, CredentialNotFoundError, CredentialEncryptionError, RunFailedError, RunTimeoutError
)
from assistable.node.interface import NodeData, NodeOptions, AssistantRunResult
from assistable.node.providers.metadata import Metadata
from assistable.node.tools import ToolRegistry
from assistable.rest.models.assistants import AssistantOption, PredictionRequest
from assistable.rest.dependencies.providers import get_metadata, get_tool_registry, get_assistant_node

router = APIRouter(prefix="/assistants", tags=["Assistant"])
LOGGER = logging.getLogger(__name__)


@router.get("", response_model=List[AssistantOption])
async def list_assistants(
    metadata: Metadata = Depends(get_metadata),
    node: OpenAIAssistantNode = Depends(get_assistant_node)
):
    """List the stored assistants that can be selected."""
    try:
        options = node.list_assistants(NodeData(), NodeOptions(metadata=metadata))
        return [AssistantOption(**option.model_dump()) for option in options]
    except Exception as e:
        LOGGER.error(f"Error listing assistants: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not list assistants.")


@router.post("/{assistant_id}/predict", response_model=AssistantRunResult)
def predict(
    assistant_id: str,
    request_body: PredictionRequest,
    metadata: Metadata = Depends(get_metadata),
    registry: ToolRegistry = Depends(get_tool_registry),
    node: OpenAIAssistantNode = Depends(get_assistant_node)
):
    """Run a stored assistant on a question, reusing the thread of an existing chat."""
    try:
        tools = registry.resolve(request_body.tools)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e.args[0]))

    node_data = NodeData(inputs={
        "selectedAssistant": assistant_id,
        "tools": tools,
        "sessionId": request_body.session_id,
    })
    options = NodeOptions(metadata=metadata, chat_id=request_body.chat_id, logger=LOGGER)

    try:
        result = node.run(node_data, request_body.question, options)
    except AssistantNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (CredentialNotFoundError, CredentialEncryptionError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (RunFailedError, RunTimeoutError) as e:
        LOGGER.error(f"Assistant {assistant_id} run failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        LOGGER.error(f"Error running assistant {assistant_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not run assistant.")

    if request_body.chat_id and result.assistant is not None:
        thread_id = result.assistant.thread_id
        metadata.add_chat_message(request_body.chat_id, "userMessage", request_body.question, session_id=thread_id)
        metadata.add_chat_message(request_body.chat_id, "apiMessage", result.text, session_id=thread_id)
    return result


@router.delete("/{assistant_id}/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def clear_session(
    assistant_id: str,
    session_id: str,
    metadata: Metadata = Depends(get_metadata),
    node: OpenAIAssistantNode = Depends(get_assistant_node)
):
    """Delete the remote thread behind a session and the chat log that points at it."""
    node_data = NodeData(inputs={"selectedAssistant": assistant_id, "sessionId": session_id})
    cleared = node.clear_session_memory(node_data, NodeOptions(metadata=metadata, logger=LOGGER))
    if not cleared:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found or could not be cleared.")
    metadata.delete_chat_messages_by_session(session_id)
