from assistable.node.cache import node_cache
from pydantic import BaseModel
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, Union
import inspect
import logging
import json

LOGGER = logging.getLogger(__name__)


EMPTY_PARAMETERS = {"type": "object", "properties": {}}


class ToolDescriptor:
    """
    A local capability that an assistant may call: a name, a description,
    an argument schema and the callable that does the work.
    """

    def __init__(self, name: str, description: str, func: Callable[..., Any],
                 args_schema: Union[Type[BaseModel], Dict[str, Any], None] = None):
        self.name = name
        self.description = description
        self.func = func
        self.args_schema = args_schema

    @classmethod
    def from_function(cls, func: Callable[..., Any], args_schema: Union[Type[BaseModel], Dict[str, Any], None] = None,
                      name: Optional[str] = None, description: Optional[str] = None) -> "ToolDescriptor":
        return cls(
            name=name or func.__name__,
            description=description or inspect.getdoc(func) or "",
            func=func,
            args_schema=args_schema,
        )

    def get_parameters(self) -> Dict[str, Any]:
        if self.args_schema is None:
            return dict(EMPTY_PARAMETERS)
        if isinstance(self.args_schema, dict):
            return self.args_schema
        return self.args_schema.model_json_schema()

    def call(self, tool_input: Dict[str, Any]) -> Any:
        arguments = tool_input or {}
        if isinstance(self.args_schema, type) and issubclass(self.args_schema, BaseModel):
            arguments = self.args_schema.model_validate(arguments).model_dump()
        LOGGER.debug(f"Calling tool {self.name} with {arguments}")
        return self.func(**arguments)

    def __repr__(self):
        return f"ToolDescriptor(name={self.name!r})"


def flatten_tools(tools) -> List[ToolDescriptor]:
    """Tool inputs may arrive nested (a tool node can supply several tools)."""
    if tools is None:
        return []
    if isinstance(tools, ToolDescriptor):
        return [tools]
    flattened = []
    for tool in tools:
        if isinstance(tool, (list, tuple)):
            flattened.extend(flatten_tools(tool))
        elif tool is not None:
            flattened.append(tool)
    return flattened


def format_to_openai_assistant_tool(tool: ToolDescriptor) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.get_parameters(),
        }
    }


def tool_to_dict(tool) -> Dict[str, Any]:
    if isinstance(tool, dict):
        return tool
    if hasattr(tool, "model_dump"):
        return tool.model_dump(exclude_none=True)
    return dict(tool.__dict__)


def reconcile_tools(remote_tools: Iterable[Any], formatted_tools: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Merge the tools already registered on a remote assistant with locally formatted tools.

    Function tools are identified by function name and the later (local) definition
    replaces an earlier (remote) one. Other tool types are de-duplicated by equality.
    Function entries without a function body are dropped.
    """
    merged: List[Dict[str, Any]] = []
    function_index: Dict[str, int] = {}
    for tool in [tool_to_dict(t) for t in remote_tools] + list(formatted_tools):
        if tool.get("type") == "function":
            function = tool.get("function")
            if not function:
                LOGGER.warning(f"Dropping function tool without a function body: {tool}")
                continue
            name = function.get("name")
            if name in function_index:
                idx = function_index[name]
                if merged[idx] != tool:
                    LOGGER.info(f"Replacing definition of function tool '{name}' with the local definition")
                    merged[idx] = tool
                continue
            function_index[name] = len(merged)
            merged.append(tool)
        elif tool not in merged:
            merged.append(tool)
    LOGGER.debug(f"Reconciled tools: {json.dumps(merged, default=str)}")
    return merged


class ToolRegistry:
    """Process-wide lookup of tools by name, used by the REST surface."""

    def __init__(self):
        self.tools: Dict[str, ToolDescriptor] = {}

    @classmethod
    @node_cache
    def registry(cls) -> "ToolRegistry":
        return ToolRegistry()

    def register(self, tool: ToolDescriptor) -> ToolDescriptor:
        if tool.name in self.tools:
            LOGGER.warning(f"Tool {tool.name} is already registered, replacing it")
        self.tools[tool.name] = tool
        return tool

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self.tools.get(name)

    def resolve(self, names: Iterable[str]) -> List[ToolDescriptor]:
        missing = [name for name in names if name not in self.tools]
        if missing:
            raise KeyError(f"Unknown tools: {', '.join(missing)}")
        return [self.tools[name] for name in names]

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self.tools.values())
