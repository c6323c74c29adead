from dataclasses import dataclass, field
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
import logging
import threading


class NodeParam(BaseModel):
    label: str
    name: str
    type: str
    list: bool = False
    optional: bool = False
    load_method: Optional[str] = None


class NodeOptionsValue(BaseModel):
    label: str
    name: str
    description: Optional[str] = None


class UsedTool(BaseModel):
    tool: str
    tool_input: Dict[str, Any] = Field(default_factory=dict)
    tool_output: Any = None


class AssistantRunInfo(BaseModel):
    assistant_id: str
    thread_id: str
    run_id: str
    messages: List[Dict[str, Any]] = Field(default_factory=list)


class AssistantRunResult(BaseModel):
    text: str
    used_tools: List[UsedTool] = Field(default_factory=list)
    assistant: Optional[AssistantRunInfo] = None


@dataclass
class NodeData:
    """Inputs configured on a node instance (selectedAssistant, tools, sessionId, ...)."""
    inputs: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None


@dataclass
class NodeOptions:
    """Per-invocation context handed to the node by its host."""
    metadata: Any = None
    chat_id: Optional[str] = None
    chatflow_id: Optional[str] = None
    logger: Optional[logging.Logger] = None
    cancel_event: Optional[threading.Event] = None
