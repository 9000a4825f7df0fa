"""Token counting using tiktoken, with a character-count fallback."""
import logging
import math
from typing import Callable, Iterable, Sequence

import tiktoken

from chatbudget.models import Message, coerce_messages


DEFAULT_MODEL = "gpt-4o"
DEFAULT_ENCODING = "o200k_base"
MESSAGE_OVERHEAD = 4  # role + formatting tokens around each message
CHARS_PER_TOKEN = 4

# tokenizer name -> encoding, or None once loading it has failed
_encoders: dict[str, tiktoken.Encoding | None] = {}


def _load_encoder(name: str) -> tiktoken.Encoding:
    """Resolve a model id or encoding name to a tiktoken encoding."""
    try:
        return tiktoken.encoding_for_model(name)
    except KeyError:
        try:
            return tiktoken.get_encoding(name)
        except ValueError:
            return tiktoken.get_encoding(DEFAULT_ENCODING)


def _get_encoder(name: str, logger: logging.Logger) -> tiktoken.Encoding | None:
    """Cached encoding for ``name``; None if it could not be loaded.

    A failed load is remembered, so later counts go straight to the estimate
    without another download attempt or warning.
    """
    if name in _encoders:
        return _encoders[name]
    try:
        encoder = _load_encoder(name)
    except Exception as e:
        logger.warning(
            f"[Tokens] Could not load tiktoken encoding for {name} ({type(e).__name__}: {e}); "
            f"estimating from character counts"
        )
        encoder = None
    _encoders[name] = encoder
    return encoder


def estimate_tokens(text: str, chars_per_token: int = CHARS_PER_TOKEN) -> int:
    return math.ceil(len(text) / chars_per_token)


class TokenCounter:
    """Counts tokens for one model's tokenizer.

    ``encode`` replaces the tiktoken lookup with any callable returning a
    sequence of tokens. Tokenizer failures never propagate: the count falls
    back to ``ceil(len(text) / chars_per_token)`` and a warning is logged.
    An encoding that cannot be loaded is reported once per tokenizer name.
    """

    def __init__(self, model: str = DEFAULT_MODEL,
                 encode: Callable[[str], Sequence] | None = None,
                 message_overhead: int = MESSAGE_OVERHEAD,
                 chars_per_token: int = CHARS_PER_TOKEN,
                 tokenizer_name: str | None = None,
                 logger: logging.Logger | None = None):
        self.model = model
        self.message_overhead = message_overhead
        self.chars_per_token = chars_per_token
        self.tokenizer_name = tokenizer_name or model
        self.logger = logger or logging.getLogger(__name__)
        self._encode = encode

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        encode = self._encode
        if encode is None:
            encoder = _get_encoder(self.tokenizer_name, self.logger)
            if encoder is None:
                return estimate_tokens(text, self.chars_per_token)
            encode = encoder.encode
        try:
            return len(encode(text))
        except Exception as e:
            estimate = estimate_tokens(text, self.chars_per_token)
            self.logger.warning(
                f"[Tokens] Tokenizer failed for {self.tokenizer_name} ({type(e).__name__}: {e}); "
                f"estimated {estimate} tokens from {len(text)} chars"
            )
            return estimate

    def message_cost(self, message: Message) -> int:
        return self.count_tokens(message.content) + self.message_overhead

    def count_message_tokens(self, messages: Iterable) -> int:
        return sum(self.message_cost(msg) for msg in coerce_messages(messages))


def count_tokens(text: str, model: str = DEFAULT_MODEL) -> int:
    return TokenCounter(model).count_tokens(text)


def count_messages_tokens(messages: Iterable, model: str = DEFAULT_MODEL) -> int:
    return TokenCounter(model).count_message_tokens(messages)
