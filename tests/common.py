import logging 
LOGGER = logging.getLogger(__name__)

import json
import os
from types import SimpleNamespace
from typing import List
from unittest.mock import MagicMock
from pydantic import BaseModel

os.environ.setdefault('CREDENTIAL_SECRET_KEY', 'test-secret-key-for-credential-testing-12345')

from assistable.node.tools import ToolDescriptor


REMOTE_ASSISTANT_ID = "asst_123"
OPENAI_API_KEY = "sk-test-key"


class NumbersInput(BaseModel):
  a: int
  b: int


class CityInput(BaseModel):
  city: str


def use_numbers(a, b):
  return json.dumps({"value": a - b})


def get_weather(city):
  return f"Sunny in {city}"


def make_tools() -> List[ToolDescriptor]:
  return [
    ToolDescriptor(name="use_numbers", description="Subtract b from a", func=use_numbers, args_schema=NumbersInput),
    ToolDescriptor(name="get_weather", description="Weather for a city", func=get_weather, args_schema=CityInput),
  ]


def make_tool_call(call_id, name, arguments):
  return SimpleNamespace(id=call_id, type="function",
                         function=SimpleNamespace(name=name, arguments=json.dumps(arguments)))


def make_run(status, tool_calls=None, last_error=None, run_id="run_1"):
  required_action = None
  if tool_calls is not None:
    required_action = SimpleNamespace(type="submit_tool_outputs",
                                      submit_tool_outputs=SimpleNamespace(tool_calls=tool_calls))
  return SimpleNamespace(id=run_id, status=status, required_action=required_action, last_error=last_error)


def text_part(value):
  return SimpleNamespace(type="text", text=SimpleNamespace(value=value, annotations=[]))


def image_part(file_id):
  return SimpleNamespace(type="image_file", image_file=SimpleNamespace(file_id=file_id))


def make_message(role, parts, message_id="msg_1"):
  return SimpleNamespace(id=message_id, role=role, content=parts)


def make_openai_client(runs, messages=None, remote_tools=None):
  """A MagicMock standing in for openai.OpenAI with the assistants/threads/runs calls wired up."""
  client = MagicMock()
  client.beta.assistants.retrieve.return_value = SimpleNamespace(id=REMOTE_ASSISTANT_ID, tools=remote_tools or [])
  client.beta.threads.create.return_value = SimpleNamespace(id="thread_new")
  client.beta.threads.retrieve.side_effect = lambda thread_id: SimpleNamespace(id=thread_id)
  client.beta.threads.runs.create.return_value = SimpleNamespace(id="run_1")
  client.beta.threads.runs.retrieve.side_effect = list(runs)
  client.beta.threads.messages.list.return_value = SimpleNamespace(data=messages or [])
  client.files.retrieve.side_effect = lambda file_id: SimpleNamespace(id=file_id, filename=f"{file_id}_image")
  return client
