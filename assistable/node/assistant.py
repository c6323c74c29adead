from assistable.node.config import Config
from assistable.node.content import TextContent, ImageFileContent, parse_content_parts, latest_assistant_message
from assistable.node.credentials import get_credential_data, get_credential_param
from assistable.node.errors import AssistantNotFoundError, CredentialNotFoundError
from assistable.node.images import ImageRenderer
from assistable.node.interface import (
    NodeParam, NodeData, NodeOptions, NodeOptionsValue, AssistantRunInfo, AssistantRunResult
)
from assistable.node.providers.metadata import Metadata, AssistantRecord
from assistable.node.runs import drive_run
from assistable.node.tools import flatten_tools, format_to_openai_assistant_tool, reconcile_tools
from openai import OpenAI, NotFoundError
from pydantic import BaseModel
from typing import Any, Callable, List, Optional
import logging
import time

LOGGER = logging.getLogger(__name__)


API_KEY_PARAM = "openAIApiKey"


def _to_plain(value) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    if hasattr(value, "__dict__"):
        return _to_plain(vars(value))
    return value


class OpenAIAssistantNode:
    """
    Agent node that runs a stored OpenAI Assistant against a conversation thread,
    answering its tool calls with the tools connected to the node.
    """

    def __init__(self, client_factory: Optional[Callable[[str], Any]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.label = "OpenAI Assistant"
        self.name = "openAIAssistant"
        self.version = 1.0
        self.type = "OpenAIAssistant"
        self.category = "Agents"
        self.icon = "openai.png"
        self.description = "An agent that uses OpenAI Assistant API to pick the tool and args to call"
        self.base_classes = [self.type]
        self.inputs = [
            NodeParam(label="Select Assistant", name="selectedAssistant", type="asyncOptions",
                      load_method="list_assistants"),
            NodeParam(label="Allowed Tools", name="tools", type="Tool", list=True, optional=True),
        ]
        self.load_methods = {"list_assistants": self.list_assistants}
        self.config = Config.config()
        self.client_factory = client_factory or self.default_client_factory
        self.sleep = sleep

    def default_client_factory(self, api_key: str) -> OpenAI:
        return OpenAI(api_key=api_key, base_url=self.config.get_openai_base_url())

    def get_metadata(self, options: NodeOptions) -> Metadata:
        return options.metadata if options.metadata is not None else Metadata.metadata()

    def get_api_key(self, assistant: AssistantRecord, node_data: NodeData, metadata: Metadata) -> Optional[str]:
        credential_data = get_credential_data(assistant.credential or "", metadata)
        return get_credential_param(API_KEY_PARAM, credential_data, node_data)

    def list_assistants(self, node_data: Optional[NodeData] = None, options: Optional[NodeOptions] = None) -> List[NodeOptionsValue]:
        metadata = self.get_metadata(options or NodeOptions())
        return_data = []
        for assistant in metadata.list_assistants():
            details = assistant.get_details()
            return_data.append(NodeOptionsValue(
                label=details.get("name") or "",
                name=assistant.id,
                description=details.get("instructions"),
            ))
        return return_data

    def init(self, node_data: Optional[NodeData] = None, input: Optional[str] = None,
             options: Optional[NodeOptions] = None):
        return None

    def clear_session_memory(self, node_data: NodeData, options: NodeOptions) -> bool:
        """
        Delete the remote thread behind a session. Best effort: resolution problems
        are logged and reported through the return value, not raised.
        """
        logger = options.logger or LOGGER
        metadata = self.get_metadata(options)
        selected_assistant_id = node_data.inputs.get("selectedAssistant")
        session_id = node_data.inputs.get("sessionId")

        assistant = metadata.get_assistant(selected_assistant_id)
        if not assistant:
            logger.error(f"Assistant {selected_assistant_id} not found")
            return False

        if not session_id and options.chat_id:
            chat_message = metadata.get_chat_message_by_chat_id(options.chat_id)
            if not chat_message:
                logger.error(f"Chat Message with Chat Id: {options.chat_id} not found")
                return False
            session_id = chat_message.session_id

        if not session_id:
            logger.error(f"No session to clear for assistant {selected_assistant_id}")
            return False

        openai_api_key = self.get_api_key(assistant, node_data, metadata)
        if not openai_api_key:
            logger.error("OpenAI ApiKey not found")
            return False

        openai_client = self.client_factory(openai_api_key)
        logger.info(f"Clearing OpenAI Thread {session_id}")
        try:
            openai_client.beta.threads.delete(session_id)
        except NotFoundError:
            logger.warning(f"OpenAI Thread {session_id} not found, nothing to clear")
            return False
        logger.info(f"Successfully cleared OpenAI Thread {session_id}")
        return True

    def run(self, node_data: NodeData, input: str, options: NodeOptions) -> AssistantRunResult:
        logger = options.logger or LOGGER
        metadata = self.get_metadata(options)
        selected_assistant_id = node_data.inputs.get("selectedAssistant")
        tools = flatten_tools(node_data.inputs.get("tools"))
        formatted_tools = [format_to_openai_assistant_tool(tool) for tool in tools]

        assistant = metadata.get_assistant(selected_assistant_id)
        if not assistant:
            raise AssistantNotFoundError(selected_assistant_id)

        openai_api_key = self.get_api_key(assistant, node_data, metadata)
        if not openai_api_key:
            raise CredentialNotFoundError()

        openai_client = self.client_factory(openai_api_key)

        openai_assistant_id = assistant.get_details().get("id")
        retrieved_assistant = openai_client.beta.assistants.retrieve(openai_assistant_id)

        if formatted_tools:
            filtered_tools = reconcile_tools(retrieved_assistant.tools or [], formatted_tools)
            openai_client.beta.assistants.update(openai_assistant_id, tools=filtered_tools)
            logger.debug(f"Updated assistant {openai_assistant_id} with {len(filtered_tools)} tools")

        # an explicit session wins over the chat log
        session_id = node_data.inputs.get("sessionId")
        if not session_id:
            chat_message = metadata.get_chat_message_by_chat_id(options.chat_id)
            session_id = chat_message.session_id if chat_message else None
        if not session_id:
            thread = openai_client.beta.threads.create()
            logger.info(f"Created OpenAI Thread {thread.id}")
        else:
            thread = openai_client.beta.threads.retrieve(session_id)
        thread_id = thread.id

        openai_client.beta.threads.messages.create(thread_id, role="user", content=input)
        run_thread = openai_client.beta.threads.runs.create(thread_id, assistant_id=retrieved_assistant.id)
        logger.info(f"Started run {run_thread.id} for assistant {retrieved_assistant.id} on thread {thread_id}")

        used_tools = drive_run(
            openai_client,
            thread_id=thread_id,
            run_id=run_thread.id,
            tools=tools,
            policy=self.config.get_poll_policy(),
            cancel_event=options.cancel_event,
            sleep=self.sleep,
        )

        messages = openai_client.beta.threads.messages.list(thread_id, order="desc")
        message_data = list(messages.data or [])
        run_info = AssistantRunInfo(
            assistant_id=openai_assistant_id,
            thread_id=thread_id,
            run_id=run_thread.id,
            messages=[_to_plain(message) for message in message_data],
        )

        assistant_message = latest_assistant_message(message_data)
        if assistant_message is None:
            logger.warning(f"No assistant message found on thread {thread_id} after run {run_thread.id}")
            return AssistantRunResult(text="", used_tools=used_tools, assistant=run_info)

        renderer = ImageRenderer(openai_client, api_key=openai_api_key,
                                 cache_dir=self.config.get_image_cache_dir(),
                                 base_url=self.config.get_openai_base_url())
        return_val = ""
        for part in parse_content_parts(assistant_message):
            if isinstance(part, TextContent):
                return_val += part.value
            elif isinstance(part, ImageFileContent):
                img_html = renderer.render(part.file_id)
                if img_html:
                    return_val += img_html

        return AssistantRunResult(text=return_val, used_tools=used_tools, assistant=run_info)


node_class = OpenAIAssistantNode
