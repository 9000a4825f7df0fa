"""Model registry — resolves a model id to its ModelProfile."""
from chatbudget.config import ChatBudgetConfig, get_config
from chatbudget.errors import UnknownModelError
from chatbudget.models import ModelProfile


def list_models(cfg: ChatBudgetConfig | None = None) -> list[str]:
    cfg = cfg or get_config()
    return sorted(cfg.models.context_windows)


def get_model_profile(model: str, safety_buffer_ratio: float | None = None,
                      cfg: ChatBudgetConfig | None = None) -> ModelProfile:
    """Build the profile for ``model``.

    ``safety_buffer_ratio`` overrides the configured ratio; ``0.0`` is a valid
    override and disables the buffer.
    """
    cfg = cfg or get_config()
    window = cfg.models.context_windows.get(model)
    if window is None:
        raise UnknownModelError(model, list_models(cfg))
    if safety_buffer_ratio is None:
        safety_buffer_ratio = cfg.token_budget.safety_buffer_ratio
    return ModelProfile(
        model=model,
        context_window_tokens=window,
        safety_buffer_ratio=safety_buffer_ratio,
    )
