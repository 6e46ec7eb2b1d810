"""Tool definitions exposed to the model.

A tool is either an `AutoTool`, executed as soon as the model calls it, or a
`ConfirmTool`, which only carries a schema: a human approves or denies the call
and the matching entry in the executions map runs on approval.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel

Execution = Callable[..., Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class AutoTool:
    name: str
    description: str
    parameters: dict[str, Any]
    kind: Literal["auto"] = "auto"


@dataclass(frozen=True, slots=True)
class ConfirmTool:
    name: str
    description: str
    input_model: type[BaseModel]
    kind: Literal["confirm"] = "confirm"

    @property
    def parameters(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()


Tool = AutoTool | ConfirmTool


@dataclass(slots=True)
class ToolSet(Mapping[str, Tool]):
    """Name-indexed tools with helpers for the chat-completion `tools` payload."""

    tools: dict[str, Tool] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Tool:
        return self.tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.tools)

    def __len__(self) -> int:
        return len(self.tools)

    def requires_confirmation(self, name: str) -> bool:
        return isinstance(self.tools.get(name), ConfirmTool)

    def merge(self, other: Mapping[str, Tool]) -> ToolSet:
        return ToolSet({**self.tools, **dict(other)})

    def schema(self) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in self.tools.values()
        ]
