"""chatbudget — trim a conversation file and print the result."""
import argparse
import json
import logging
import sys

from pydantic import ValidationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


def _read_messages(path: str) -> list:
    """Read a JSON list of messages, or an object with a "messages" list."""
    if path == "-":
        data = json.load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    if isinstance(data, dict):
        data = data.get("messages", [])
    if not isinstance(data, list):
        raise ValueError("conversation must be a JSON list of messages")
    return data


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Trim a conversation to a model's token budget")
    parser.add_argument("conversation", help="JSON file with the messages ('-' for stdin)")
    parser.add_argument("--model", help="Model id (defaults to models.default in the config)")
    parser.add_argument("--config", help="Path to a chatbudget YAML config")
    parser.add_argument("--safety-buffer", type=float, help="Override the safety buffer ratio")
    parser.add_argument("--stats-only", action="store_true", help="Print only the usage stats")
    args = parser.parse_args(argv)

    from chatbudget.config import load_config, get_config
    from chatbudget.conversation import to_wire_messages
    from chatbudget.errors import ChatBudgetError
    from chatbudget.manager import create_token_manager

    try:
        cfg = load_config(args.config) if args.config else get_config()
        messages = _read_messages(args.conversation)
        manager = create_token_manager(args.model, safety_buffer_ratio=args.safety_buffer, cfg=cfg)
        trimmed, stats = manager.prepare(messages)
    except (OSError, ValueError, ValidationError, ChatBudgetError) as e:
        print(f"[chatbudget] {e}", file=sys.stderr)
        return 2

    output = {"model": manager.model, "stats": stats.model_dump()}
    if not args.stats_only:
        output["messages"] = to_wire_messages(trimmed)
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
