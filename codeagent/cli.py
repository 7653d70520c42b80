"""Command-line entry point for the chat agent."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from .agent import Agent
from .catalog import get_all_tools
from .chat import ChatApp, ChatSession
from .client import Config


def main(argv: Sequence[str] | None = None) -> int:
    """Start the full-screen chat with every tool available."""
    parser = argparse.ArgumentParser(
        prog="codeagent",
        description="Chat with a coding agent that can read and edit files in the working directory.",
    )
    parser.parse_args(argv)

    config = Config.from_env()
    try:
        agent = Agent(config.client, get_all_tools())
        ChatApp(ChatSession(agent)).run()
    except Exception as exc:  # fatal: report and exit non-zero
        print(f"codeagent: {exc}", file=sys.stderr)
        return 1
    finally:
        config.client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())