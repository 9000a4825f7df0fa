"""chatbudget — conversation token budgeting for chat completion requests."""
import logging

from .budget import ConversationBudgeter
from .errors import ChatBudgetError, ConfigurationError, UnknownModelError
from .manager import TokenManager, create_token_manager
from .models import Message, ModelProfile, TokenStats
from .registry import get_model_profile, list_models
from .usage import UsageReporter
from .utils.tokens import TokenCounter

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConversationBudgeter",
    "ChatBudgetError",
    "ConfigurationError",
    "UnknownModelError",
    "TokenManager",
    "create_token_manager",
    "Message",
    "ModelProfile",
    "TokenStats",
    "get_model_profile",
    "list_models",
    "UsageReporter",
    "TokenCounter",
]
