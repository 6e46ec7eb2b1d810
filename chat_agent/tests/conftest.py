import json
from typing import Any

import pytest


def text_chunk(text: str) -> dict[str, Any]:
    return {"choices": [{"index": 0, "delta": {"content": text}}]}


def tool_call_chunk(call_id: str, name: str, arguments: dict[str, Any], index: int = 0) -> dict[str, Any]:
    return {
        "choices": [
            {
                "index": 0,
                "delta": {
                    "tool_calls": [
                        {
                            "index": index,
                            "id": call_id,
                            "type": "function",
                            "function": {"name": name, "arguments": json.dumps(arguments)},
                        }
                    ]
                },
            }
        ]
    }


class ScriptedModelClient:
    """Replays one list of chunks per model step and records each request."""

    def __init__(self, steps: list[list[dict[str, Any]]]) -> None:
        self.steps = list(steps)
        self.requests: list[dict[str, Any]] = []

    async def stream_chat_completion(self, messages, *, tools=None):
        self.requests.append({"messages": [dict(message) for message in messages], "tools": tools})
        if not self.steps:
            raise AssertionError("model called more times than scripted")
        for chunk in self.steps.pop(0):
            yield chunk


@pytest.fixture
def chunks():
    class _Chunks:
        text = staticmethod(text_chunk)
        tool_call = staticmethod(tool_call_chunk)

    return _Chunks


@pytest.fixture
def scripted_client():
    return ScriptedModelClient
