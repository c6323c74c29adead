from assistable.node.assistant import OpenAIAssistantNode
from assistable.node.cache import node_cache
from assistable.node.providers.metadata import Metadata
from assistable.node.tools import ToolRegistry


def get_metadata() -> Metadata:
    """FastAPI dependency to get the shared Metadata instance."""
    return Metadata.metadata()


def get_tool_registry() -> ToolRegistry:
    """FastAPI dependency to get the process tool registry."""
    return ToolRegistry.registry()


@node_cache
def get_assistant_node() -> OpenAIAssistantNode:
    """FastAPI dependency to get the OpenAI Assistant node."""
    return OpenAIAssistantNode()
