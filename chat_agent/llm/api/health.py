"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...core.config import AgentSettings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health/")
async def health_check() -> dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }


@router.get("/check-open-ai-key")
async def check_openai_key(settings: AgentSettings = Depends(get_settings)) -> dict[str, bool]:
    return {"success": settings.has_openai_key()}
