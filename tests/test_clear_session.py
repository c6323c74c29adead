"""
Tests for clearing a session: the remote thread is deleted when everything
resolves, otherwise the problem is logged and False is returned.
"""

import httpx
import openai
import pytest
from unittest.mock import MagicMock

from tests.common import REMOTE_ASSISTANT_ID, OPENAI_API_KEY
from assistable.node.assistant import OpenAIAssistantNode
from assistable.node.interface import NodeData, NodeOptions
from assistable.node.providers.metadata import Metadata


@pytest.fixture
def metadata(tmp_path):
    metadata = Metadata(f"sqlite:///{tmp_path / 'metadata.db'}")
    yield metadata
    metadata.close()


@pytest.fixture
def stored_assistant(metadata):
    credential = metadata.create_credential("openai", "openAIApi", {"openAIApiKey": OPENAI_API_KEY})
    return metadata.create_assistant({"id": REMOTE_ASSISTANT_ID, "name": "Helper"}, credential=credential.id)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def node(client):
    return OpenAIAssistantNode(client_factory=lambda api_key: client)


def _not_found(thread_id):
    request = httpx.Request("DELETE", f"https://api.openai.com/v1/threads/{thread_id}")
    response = httpx.Response(404, request=request)
    return openai.NotFoundError("No thread found", response=response, body=None)


class TestClearSessionMemory:

    def test_deletes_thread_for_session_id(self, node, client, metadata, stored_assistant):
        cleared = node.clear_session_memory(
            NodeData(inputs={"selectedAssistant": stored_assistant.id, "sessionId": "thread_1"}),
            NodeOptions(metadata=metadata))
        assert cleared is True
        client.beta.threads.delete.assert_called_once_with("thread_1")

    def test_resolves_session_from_chat_id(self, node, client, metadata, stored_assistant):
        metadata.add_chat_message("chat-1", "userMessage", "hello", session_id="thread_chat")
        cleared = node.clear_session_memory(
            NodeData(inputs={"selectedAssistant": stored_assistant.id}),
            NodeOptions(metadata=metadata, chat_id="chat-1"))
        assert cleared is True
        client.beta.threads.delete.assert_called_once_with("thread_chat")

    def test_missing_assistant_is_logged(self, node, client, metadata):
        logger = MagicMock()
        cleared = node.clear_session_memory(
            NodeData(inputs={"selectedAssistant": "missing", "sessionId": "thread_1"}),
            NodeOptions(metadata=metadata, logger=logger))
        assert cleared is False
        logger.error.assert_called_once_with("Assistant missing not found")
        client.beta.threads.delete.assert_not_called()

    def test_missing_chat_message_is_logged(self, node, client, metadata, stored_assistant):
        logger = MagicMock()
        cleared = node.clear_session_memory(
            NodeData(inputs={"selectedAssistant": stored_assistant.id}),
            NodeOptions(metadata=metadata, chat_id="chat-unknown", logger=logger))
        assert cleared is False
        logger.error.assert_called_once_with("Chat Message with Chat Id: chat-unknown not found")
        client.beta.threads.delete.assert_not_called()

    def test_missing_credential_is_logged(self, node, client, metadata):
        assistant = metadata.create_assistant({"id": REMOTE_ASSISTANT_ID, "name": "No key"})
        logger = MagicMock()
        cleared = node.clear_session_memory(
            NodeData(inputs={"selectedAssistant": assistant.id, "sessionId": "thread_1"}),
            NodeOptions(metadata=metadata, logger=logger))
        assert cleared is False
        logger.error.assert_called_once_with("OpenAI ApiKey not found")
        client.beta.threads.delete.assert_not_called()

    def test_remote_thread_already_gone(self, node, client, metadata, stored_assistant):
        client.beta.threads.delete.side_effect = _not_found("thread_1")
        cleared = node.clear_session_memory(
            NodeData(inputs={"selectedAssistant": stored_assistant.id, "sessionId": "thread_1"}),
            NodeOptions(metadata=metadata))
        assert cleared is False
