"""Usage reporting for a message list against a model profile."""
from typing import Iterable

from chatbudget.models import ModelProfile, TokenStats
from chatbudget.utils.tokens import TokenCounter


class UsageReporter:
    def __init__(self, profile: ModelProfile, counter: TokenCounter | None = None):
        self.profile = profile
        self.counter = counter or TokenCounter(profile.model)

    def stats(self, messages: Iterable) -> TokenStats:
        """Token totals for ``messages``. Percentages above 100 mean overflow."""
        total_tokens = self.counter.count_message_tokens(messages)
        actual_limit = self.profile.effective_limit

        if actual_limit > 0:
            usage_percentage = total_tokens / actual_limit * 100
        else:
            usage_percentage = float("inf") if total_tokens else 0.0

        return TokenStats(
            total_tokens=total_tokens,
            limit=self.profile.context_window_tokens,
            actual_limit=actual_limit,
            usage_percentage=usage_percentage,
            remaining_tokens=max(0, actual_limit - total_tokens),
        )
