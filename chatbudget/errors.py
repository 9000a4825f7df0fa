"""Exception types raised by chatbudget."""


class ChatBudgetError(Exception):
    """Base class for all chatbudget errors."""


class ConfigurationError(ChatBudgetError):
    """Configuration file exists but cannot be used."""


class UnknownModelError(ConfigurationError, KeyError):
    """No context window is registered for the requested model."""

    def __init__(self, model: str, known: list[str] | None = None):
        self.model = model
        self.known = known or []
        super().__init__(model)

    def __str__(self) -> str:
        if self.known:
            return f"Unknown model '{self.model}'. Known models: {', '.join(self.known)}"
        return f"Unknown model '{self.model}'"
