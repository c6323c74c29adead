from dataclasses import dataclass
from typing import List, Optional, Union
import logging

LOGGER = logging.getLogger(__name__)


@dataclass
class TextContent:
    value: str


@dataclass
class ImageFileContent:
    file_id: str


MessageContent = Union[TextContent, ImageFileContent]


def parse_content_parts(message) -> List[MessageContent]:
    """Turn the content parts of a thread message into known variants, skipping the rest."""
    parts: List[MessageContent] = []
    for part in message.content or []:
        if part.type == "text":
            # annotations (citations, file paths) are not rendered
            parts.append(TextContent(value=part.text.value))
        elif part.type == "image_file":
            parts.append(ImageFileContent(file_id=part.image_file.file_id))
        else:
            LOGGER.warning(f"Skipping message content of unhandled type {part.type} in message {message.id}")
    return parts


def latest_assistant_message(messages) -> Optional[object]:
    """Messages are listed newest first; return the first one written by the assistant."""
    for message in messages:
        if message.role == "assistant":
            return message
    return None
