"""Conversation budgeter — trims a message list to fit a model's effective limit.

System messages always survive in full. Other messages are kept newest-first
as a contiguous suffix of the conversation; the first message that does not
fit may be kept as a truncated fragment, and everything older is dropped.
"""
import logging
import math
from typing import Iterable

from chatbudget.models import Message, ModelProfile, coerce_messages
from chatbudget.utils.tokens import TokenCounter

MIN_FRAGMENT_TOKENS = 10
TRUNCATION_STEP_RATIO = 0.1
TRUNCATION_MARKER = " [truncated]"


class ConversationBudgeter:
    def __init__(self, profile: ModelProfile, counter: TokenCounter | None = None,
                 min_fragment_tokens: int = MIN_FRAGMENT_TOKENS,
                 truncation_step_ratio: float = TRUNCATION_STEP_RATIO,
                 truncation_marker: str = TRUNCATION_MARKER,
                 logger: logging.Logger | None = None):
        self.profile = profile
        self.counter = counter or TokenCounter(profile.model)
        self.min_fragment_tokens = min_fragment_tokens
        self.truncation_step_ratio = truncation_step_ratio
        self.truncation_marker = truncation_marker
        self.logger = logger or logging.getLogger(__name__)

    def trim(self, messages: Iterable) -> list[Message]:
        """Return a new message list whose token count fits the effective limit.

        Under-budget input comes back unchanged. When system messages alone
        reach the limit, only they are returned, even though the result may
        still be over budget; the caller decides what to do with that.
        """
        messages = coerce_messages(messages)
        if not messages:
            return []

        limit = self.profile.effective_limit
        total_tokens = self.counter.count_message_tokens(messages)
        if total_tokens <= limit:
            return messages

        self.logger.info(f"[Budget] Token limit exceeded: {total_tokens}/{limit} tokens ({self.profile.model})")

        system_messages = [m for m in messages if m.role == "system"]
        other_messages = [m for m in messages if m.role != "system"]

        system_tokens = self.counter.count_message_tokens(system_messages)
        if system_tokens >= limit:
            self.logger.warning(
                f"[Budget] System messages use {system_tokens}/{limit} tokens, returning only system messages"
            )
            return system_messages

        available = limit - system_tokens
        kept = self._fit_suffix(other_messages, available)
        trimmed = system_messages + kept

        self.logger.info(
            f"[Budget] Trimmed to {len(trimmed)}/{len(messages)} messages, "
            f"{self.counter.count_message_tokens(trimmed)} tokens"
        )
        return trimmed

    def _fit_suffix(self, messages: list[Message], available: int) -> list[Message]:
        """Keep the longest suffix of ``messages`` that fits ``available`` tokens,
        plus at most one truncated message in front of it."""
        kept: list[Message] = []
        used = 0

        for message in reversed(messages):
            cost = self.counter.message_cost(message)
            if used + cost <= available:
                kept.append(message)
                used += cost
                continue

            remaining = available - used
            if remaining > self.min_fragment_tokens:
                fragment = self._truncate(message.content, remaining - self.counter.message_overhead)
                if fragment:
                    kept.append(Message(role=message.role, content=fragment + self.truncation_marker))
            break

        kept.reverse()
        return kept

    def _truncate(self, text: str, max_tokens: int) -> str:
        """Drop trailing characters until ``text`` plus the marker fits ``max_tokens``.

        Returns "" when no non-empty prefix fits. Each pass removes at least one
        character, so the loop ends after at most ``len(text)`` passes.
        """
        if max_tokens <= 0:
            return ""

        truncated = text
        while truncated:
            if self.counter.count_tokens(truncated + self.truncation_marker) <= max_tokens:
                return truncated
            remove = max(1, math.floor(len(truncated) * self.truncation_step_ratio))
            truncated = truncated[:-remove]
        return ""
