"""Clock tool."""

from datetime import datetime, timezone

from ...core.logging_config import get_logger
from ..registry import mcp

logger = get_logger(__name__)


async def get_local_time(location: str) -> str:
    """Get the local time for a specified location."""

    logger.info("local_time_requested", location=location)
    return f"Local time for {location} is {datetime.now(tz=timezone.utc).isoformat()}"


mcp.tool(get_local_time, name="getLocalTime")
