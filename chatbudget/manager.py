"""TokenManager — one object per request bundling counter, budgeter and reporter."""
import logging
from typing import Callable, Iterable, Sequence

from chatbudget.budget import ConversationBudgeter
from chatbudget.config import ChatBudgetConfig, get_config
from chatbudget.models import Message, TokenStats
from chatbudget.registry import get_model_profile
from chatbudget.usage import UsageReporter
from chatbudget.utils.tokens import TokenCounter


class TokenManager:
    def __init__(self, model: str, safety_buffer_ratio: float | None = None,
                 cfg: ChatBudgetConfig | None = None,
                 encode: Callable[[str], Sequence] | None = None,
                 logger: logging.Logger | None = None):
        cfg = cfg or get_config()
        budget_cfg = cfg.token_budget
        self.logger = logger or logging.getLogger(__name__)

        self.profile = get_model_profile(model, safety_buffer_ratio, cfg)
        self.counter = TokenCounter(
            model,
            encode=encode,
            message_overhead=budget_cfg.message_overhead,
            chars_per_token=budget_cfg.fallback_chars_per_token,
            tokenizer_name=cfg.models.tokenizer_overrides.get(model),
            logger=logger,
        )
        self.budgeter = ConversationBudgeter(
            self.profile,
            self.counter,
            min_fragment_tokens=budget_cfg.min_fragment_tokens,
            truncation_step_ratio=budget_cfg.truncation_step_ratio,
            truncation_marker=budget_cfg.truncation_marker,
            logger=logger,
        )
        self.reporter = UsageReporter(self.profile, self.counter)

    @property
    def model(self) -> str:
        return self.profile.model

    def count_tokens(self, text: str) -> int:
        return self.counter.count_tokens(text)

    def count_message_tokens(self, messages: Iterable) -> int:
        return self.counter.count_message_tokens(messages)

    def trim_messages(self, messages: Iterable) -> list[Message]:
        return self.budgeter.trim(messages)

    def get_token_stats(self, messages: Iterable) -> TokenStats:
        return self.reporter.stats(messages)

    def prepare(self, messages: Iterable) -> tuple[list[Message], TokenStats]:
        """Trim ``messages`` and report usage of the trimmed set."""
        trimmed = self.trim_messages(messages)
        stats = self.get_token_stats(trimmed)
        self.logger.info(
            f"[Usage] {self.model}: {stats.total_tokens}/{stats.actual_limit} tokens "
            f"({stats.usage_percentage:.1f}%)"
        )
        return trimmed, stats


def create_token_manager(model: str | None = None, **options) -> TokenManager:
    """Create a TokenManager, using the configured default model when ``model`` is None."""
    if model is None:
        cfg = options.get("cfg") or get_config()
        model = cfg.models.default
    return TokenManager(model, **options)
