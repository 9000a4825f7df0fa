"""
chatbudget/config.py — Configuration loading with Pydantic models.

Loads chatbudget.yaml, expands ${ENV_VAR} references, and exposes a global
`config` singleton of type ChatBudgetConfig.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError

from chatbudget.errors import ConfigurationError


DEFAULT_CONFIG_PATH = "chatbudget.yaml"
CONFIG_ENV_VAR = "CHATBUDGET_CONFIG"


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


def _default_context_windows() -> Dict[str, int]:
    return {
        "gpt-4o": 128000,
        "gpt-4o-mini": 128000,
        "gpt-4-turbo": 128000,
        "gpt-4": 8192,
        "gpt-3.5-turbo": 4096,
    }


class ModelsConfig(BaseModel):
    default: str = "gpt-4o"
    context_windows: Dict[str, int] = Field(default_factory=_default_context_windows)
    # model id -> tiktoken model or encoding name, for ids tiktoken cannot map
    tokenizer_overrides: Dict[str, str] = Field(default_factory=dict)


class TokenBudgetConfig(BaseModel):
    safety_buffer_ratio: float = Field(0.2, ge=0.0, lt=1.0)
    message_overhead: int = Field(4, ge=0)
    min_fragment_tokens: int = Field(10, ge=0)
    truncation_step_ratio: float = Field(0.1, gt=0.0, le=1.0)
    truncation_marker: str = " [truncated]"
    fallback_chars_per_token: int = Field(4, ge=1)


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


class ChatBudgetConfig(BaseModel):
    models: ModelsConfig = Field(default_factory=ModelsConfig)
    token_budget: TokenBudgetConfig = Field(default_factory=TokenBudgetConfig)


# ---------------------------------------------------------------------------
# Environment variable expansion
# ---------------------------------------------------------------------------

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: Any) -> Any:
    """Substitute ${VAR} in every string of a parsed YAML tree.

    Unset variables keep their literal ``${VAR}`` text, so a numeric field
    such as a context window fails validation naming the missing variable.
    """
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> ChatBudgetConfig:
    """Load and parse a chatbudget config YAML file.

    Args:
        path: Path to the YAML config file.

    Returns:
        A fully populated :class:`ChatBudgetConfig` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigurationError: If the file is not valid YAML or fails validation.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path.resolve()}")

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            raw: Dict[str, Any] = yaml.safe_load(fh) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config root must be a mapping: {config_path}")

    expanded = _expand_env_vars(raw)
    try:
        return ChatBudgetConfig.model_validate(expanded)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}: {e}") from e


# ---------------------------------------------------------------------------
# Global singleton
# ---------------------------------------------------------------------------

#: Global config instance.  Populated when the module is first imported via
#: :func:`load_config`, or replaced by calling ``load_config`` and assigning
#: the result here.
config: ChatBudgetConfig = ChatBudgetConfig()


def _init_global_config(path: str | None = None) -> None:
    """Load the global config on import; fall back to defaults if the file
    does not exist."""
    global config
    try:
        config = load_config(path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    except FileNotFoundError:
        pass


_init_global_config()


def get_config() -> ChatBudgetConfig:
    """Return the current global config (reads the module attribute at call time)."""
    return config
