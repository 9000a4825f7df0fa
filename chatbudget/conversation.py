"""Request-boundary helpers: shape raw chat input into Message lists.

Covers uploaded-file normalization, memory and file context blocks, the
conversation and title prompts, and conversion to the completion API's wire
format.
"""
import json
import logging
import re
from typing import Iterable, Optional

from pydantic import BaseModel, Field, ValidationError

from chatbudget.models import Message, coerce_messages

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant, similar to ChatGPT. Answer user questions clearly and concisely. "
    "When users upload files, analyze the content and provide relevant insights."
)

TITLE_SYSTEM_PROMPT = (
    "You are an assistant that generates short, descriptive titles for chat conversations. "
    "Respond with only the title, no extra text."
)

IMAGE_NAME_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|bmp)$", re.IGNORECASE)


class UploadedFile(BaseModel):
    """A file attached to a user turn, as stored alongside the message."""

    name: str = ""
    extracted_text: Optional[str] = Field(None, alias="extractedText")
    url: Optional[str] = None
    size: Optional[int] = None
    type: Optional[str] = None

    model_config = {"populate_by_name": True}

    @property
    def is_image(self) -> bool:
        return bool(self.name and IMAGE_NAME_PATTERN.search(self.name))


def parse_uploaded_files(raw) -> list[UploadedFile]:
    """Normalize the ``files`` field of a chat request.

    Accepts a list of dicts, a JSON string holding such a list, or a JSON list
    whose items are themselves JSON strings. Anything malformed yields [].
    """
    if raw is None or raw == "":
        return []
    try:
        items = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(items, list):
            raise ValueError(f"expected a list of files, got {type(items).__name__}")
        items = [json.loads(item) if isinstance(item, str) else item for item in items]
        return [UploadedFile.model_validate(item) for item in items]
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning(f"[Conversation] Failed to parse uploaded files: {e}")
        return []


def build_file_content(files: Iterable[UploadedFile]) -> str:
    parts = []
    for file in files:
        if file.url and file.is_image:
            parts.append(f"User uploaded an image: {file.url}")
        elif file.extracted_text and file.extracted_text.strip():
            parts.append(f"[File: {file.name}]\n{file.extracted_text.strip()}")
        elif file.url and file.name:
            parts.append(f"User uploaded a file: {file.url}")

    if not parts:
        return ""
    return "\n\nThe following files were uploaded by the user:\n" + "\n\n".join(parts)


def build_memory_context(memories: Iterable[str]) -> str:
    memories = [m for m in memories if m]
    if not memories:
        return ""
    return "\n\nPrevious relevant context:\n" + "\n".join(memories)


def parse_messages(raw: Iterable) -> list[Message]:
    """Convert stored history records into Messages.

    Extra keys are ignored; an unknown role raises pydantic.ValidationError.
    """
    return coerce_messages(raw)


def build_chat_messages(message: str, history: Iterable = (), files: Iterable[UploadedFile] = (),
                        memories: Iterable[str] = (), system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> list[Message]:
    """Assemble the candidate conversation: system prompt, history, new user turn."""
    messages = [Message(role="system", content=system_prompt + build_memory_context(memories))]
    messages.extend(parse_messages(history))
    messages.append(Message(role="user", content=(message or "") + build_file_content(files)))
    return messages


def build_title_messages(message: str) -> list[Message]:
    return [
        Message(role="system", content=TITLE_SYSTEM_PROMPT),
        Message(role="user", content=f'Generate a title for this conversation: "{message}"'),
    ]


def to_wire_messages(messages: Iterable) -> list[dict]:
    """Messages as ``{"role", "content"}`` dicts for the completion API."""
    return [m.to_wire() for m in coerce_messages(messages)]
