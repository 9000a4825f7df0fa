"""Shared fixtures for the chatbudget test suite."""
import pytest
from chatbudget.budget import ConversationBudgeter
from chatbudget.config import ChatBudgetConfig, ModelsConfig, TokenBudgetConfig
from chatbudget.models import ModelProfile
from chatbudget.usage import UsageReporter
from chatbudget.utils.tokens import TokenCounter


@pytest.fixture
def ws_counter():
    """TokenCounter that counts whitespace-separated words, overhead 4."""
    return TokenCounter("test-model", encode=str.split)


@pytest.fixture
def make_profile():
    def _make(limit: int) -> ModelProfile:
        return ModelProfile(model="test-model", context_window_tokens=limit, safety_buffer_ratio=0.0)
    return _make


@pytest.fixture
def make_budgeter(ws_counter, make_profile):
    """Budgeter whose effective limit is exactly ``limit`` tokens."""
    def _make(limit: int, **kwargs) -> ConversationBudgeter:
        return ConversationBudgeter(make_profile(limit), ws_counter, **kwargs)
    return _make


@pytest.fixture
def make_reporter(ws_counter, make_profile):
    def _make(limit: int) -> UsageReporter:
        return UsageReporter(make_profile(limit), ws_counter)
    return _make


@pytest.fixture
def mock_config():
    """Config with a small test model alongside the defaults."""
    return ChatBudgetConfig(
        models=ModelsConfig(
            default="test-small",
            context_windows={"test-small": 1000, "gpt-4": 8192, "gpt-3.5-turbo": 4096},
        ),
        token_budget=TokenBudgetConfig(),
    )
