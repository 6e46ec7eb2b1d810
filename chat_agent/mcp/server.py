"""FastMCP-backed tool set assembly and execution helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastmcp.exceptions import NotFoundError
from fastmcp.tools.tool import ToolResult

from ..core.exceptions import ToolExecutionError
from ..core.logging_config import get_logger
from .registry import mcp

# Import tool modules so registrations run at import time.
from . import tools  # noqa: F401
from .tools.weather import fetch_weather, get_weather_information
from .toolset import AutoTool, ConfirmTool, Execution, ToolSet

logger = get_logger(__name__)

CONFIRM_TOOLS: tuple[ConfirmTool, ...] = (get_weather_information,)

# Keys must match the ConfirmTool names above.
EXECUTIONS: Mapping[str, Execution] = {
    get_weather_information.name: fetch_weather,
}


async def load_tool_set() -> ToolSet:
    """Collect enabled FastMCP tools and merge in the confirmation-required ones."""

    registered = await mcp.get_tools()
    entries: dict[str, AutoTool] = {}

    for tool in registered.values():
        if not tool.enabled:
            continue
        mcp_tool = tool.to_mcp_tool()
        entries[mcp_tool.name] = AutoTool(
            name=mcp_tool.name,
            description=mcp_tool.description or "",
            parameters=mcp_tool.inputSchema or {"type": "object", "properties": {}},
        )

    tool_set = ToolSet(entries).merge({tool.name: tool for tool in CONFIRM_TOOLS})
    logger.info(
        "tool_set_loaded",
        auto=sorted(name for name, tool in tool_set.items() if tool.kind == "auto"),
        confirm=sorted(name for name, tool in tool_set.items() if tool.kind == "confirm"),
    )
    return tool_set


async def call_tool(name: str, arguments: Mapping[str, Any]) -> Any:
    """Execute an auto tool by name with arguments."""

    logger.debug("mcp_tool_call", name=name, arguments=arguments)
    try:
        tool_result = await mcp._tool_manager.call_tool(name, dict(arguments))
    except NotFoundError as exc:
        raise ToolExecutionError(f"Unknown tool: {name}") from exc

    return _serialize_tool_result(tool_result)


def _serialize_tool_result(tool_result: ToolResult) -> Any:
    """Convert a FastMCP ToolResult into a JSON-serialisable payload."""

    if tool_result.structured_content is not None:
        payload = tool_result.structured_content
        if isinstance(payload, dict) and set(payload.keys()) == {"result"}:
            return payload["result"]
        return payload

    blocks: list[Any] = []
    for block in tool_result.content:
        text = getattr(block, "text", None)
        blocks.append(text if text is not None else block.model_dump())
    if len(blocks) == 1:
        return blocks[0]
    return blocks
