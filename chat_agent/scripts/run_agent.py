"""Run the chat agent service, or the local bridge with `bridge`, locally.

Usage:
    python -m chat_agent.scripts.run_agent           # chat agent API
    python -m chat_agent.scripts.run_agent bridge    # local bridge
"""

from __future__ import annotations

import sys

import uvicorn

from chat_agent.core.config import get_settings


def run_agent() -> None:
    settings = get_settings()
    if settings.app_env == "development":
        uvicorn.run(
            "chat_agent.llm.main:app",
            host=settings.agent_host,
            port=settings.agent_port,
            reload=True,
        )
        return

    from chat_agent.llm.main import app

    uvicorn.run(app, host=settings.agent_host, port=settings.agent_port, reload=False)


def run_bridge() -> None:
    from chat_agent.bridge.main import app

    settings = get_settings()
    print(f"Local bridge running on http://{settings.bridge_host}:{settings.bridge_port}")
    uvicorn.run(app, host=settings.bridge_host, port=settings.bridge_port, reload=False)


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] == "bridge":
        run_bridge()
    elif args:
        raise SystemExit(f"unknown command: {args[0]!r} (expected no argument or 'bridge')")
    else:
        run_agent()


if __name__ == "__main__":
    main()
