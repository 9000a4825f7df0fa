"""
chatbudget/models.py — Pydantic models shared by the budget components.

Covers:
- Message: a single conversation turn with a closed role set
- ModelProfile: context window and safety buffer for one model
- TokenStats: read-only usage report
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, Field


Role = Literal["system", "user", "assistant"]


# ---------------------------------------------------------------------------
# Core message type
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single message in a conversation.

    Unknown keys (database ids, timestamps, attached files) are dropped on
    validation so only ``role`` and ``content`` reach the completion API.
    """

    role: Role
    content: str

    model_config = {"frozen": True, "extra": "ignore"}

    def to_wire(self) -> dict:
        return {"role": self.role, "content": self.content}


# ---------------------------------------------------------------------------
# Model profile
# ---------------------------------------------------------------------------


class ModelProfile(BaseModel):
    """Context window of a model and the share reserved for its response."""

    model: str
    context_window_tokens: int = Field(..., ge=0)
    safety_buffer_ratio: float = Field(0.2, ge=0.0, lt=1.0)

    model_config = {"frozen": True, "protected_namespaces": ()}

    @property
    def safety_buffer(self) -> int:
        return math.floor(self.context_window_tokens * self.safety_buffer_ratio)

    @property
    def effective_limit(self) -> int:
        """Tokens available for input messages."""
        return self.context_window_tokens - self.safety_buffer


# ---------------------------------------------------------------------------
# Usage report
# ---------------------------------------------------------------------------


class TokenStats(BaseModel):
    total_tokens: int
    limit: int
    actual_limit: int
    usage_percentage: float
    remaining_tokens: int

    model_config = {"frozen": True}

    @property
    def over_limit(self) -> bool:
        return self.total_tokens > self.actual_limit


def coerce_messages(messages) -> list[Message]:
    """Validate a sequence of Message objects or ``{"role", "content"}`` dicts.

    Raises pydantic.ValidationError on an unknown role or missing fields.
    """
    return [m if isinstance(m, Message) else Message.model_validate(m) for m in messages]
