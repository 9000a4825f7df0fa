from .tokens import TokenCounter, count_tokens, count_messages_tokens, estimate_tokens

__all__ = ["TokenCounter", "count_tokens", "count_messages_tokens", "estimate_tokens"]
