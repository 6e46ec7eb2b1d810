"""Local bridge service for resource-heavy tools that run beside the agent."""

from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from ..core.config import AgentSettings, get_settings
from ..core.logging_config import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

TOOL_RESULTS: dict[str, str] = {
    "pixelDetect": "Pixel detection simulated.",
    "mapSonar": "Sonar mapping complete.",
    "rs3Observer": "RS3 observer mode activated.",
}


class ExecRequest(BaseModel):
    tool: Any = None
    params: Any = None


app = FastAPI(
    title="Chat Agent Local Bridge",
    version="0.1.0",
    description="Local helper endpoints for tools that need the host machine.",
)


@app.get("/", response_class=PlainTextResponse)
async def index() -> str:
    return "🧩 Local Bridge Active"


@app.post("/exec")
async def exec_tool(request: ExecRequest) -> JSONResponse:
    result = TOOL_RESULTS.get(request.tool) if isinstance(request.tool, str) else None
    if result is None:
        logger.warning("bridge_unknown_tool", tool=request.tool)
        return JSONResponse({"error": "Unknown tool"}, status_code=400)

    logger.info("bridge_tool_executed", tool=request.tool)
    payload: dict[str, Any] = {"result": result}
    if "params" in request.model_fields_set:
        payload["params"] = request.params
    return JSONResponse(payload)


@app.get("/sync")
async def sync_files(settings: AgentSettings = Depends(get_settings)) -> dict[str, list[str]]:
    resource_dir = Path(settings.bridge_resource_dir).resolve()
    if not resource_dir.is_dir():
        logger.warning("bridge_resource_dir_missing", path=str(resource_dir))
        raise HTTPException(status_code=404, detail=f"Resource directory not found: {resource_dir}")
    return {"files": sorted(entry.name for entry in resource_dir.iterdir())}
