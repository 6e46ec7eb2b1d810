"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from ..core.config import env_file_candidates, get_settings, resolved_env_file
from ..core.logging_config import configure_logging, get_logger
from .api.chat import router as chat_router
from .api.health import router as health_router
from .services.cron_trigger import CronTrigger
from .services.registry import get_agent_registry

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan handler."""

    settings = get_settings()
    logger.info(
        "agent_startup",
        env=settings.app_env,
        log_level=settings.log_level,
        agent_host=settings.agent_host,
        agent_port=settings.agent_port,
        model=settings.openai_model,
        openai_key_configured=settings.has_openai_key(),
    )
    logger.info(
        "environment_loaded",
        env_file=resolved_env_file() or "not-found",
        env_candidates=list(env_file_candidates()),
    )
    registry = get_agent_registry()
    config = await registry.config()
    logger.info("agent_tools_ready", tools=sorted(config.tools))

    trigger: CronTrigger | None = None
    if settings.cron_trigger:
        trigger = CronTrigger(settings.cron_trigger, poll_interval=settings.scheduler_poll_interval)
        trigger.start()

    yield

    if trigger is not None:
        await trigger.stop()
    await registry.shutdown()
    logger.info("agent_shutdown")


app = FastAPI(
    title="Chat Agent",
    version="0.1.0",
    description="Chat agent service with tool confirmation and task scheduling.",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_incoming_requests(request: Request, call_next):
    logger.info(
        "http_request_received",
        method=request.method,
        path=request.url.path,
        client=str(request.client[0]) if request.client else "unknown",
    )
    if not get_settings().has_openai_key():
        logger.error(
            "openai_api_key_missing",
            hint="set OPENAI_API_KEY in the environment or a .env file",
        )
    response = await call_next(request)
    logger.info(
        "http_request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
    )
    return response


app.include_router(health_router)
app.include_router(chat_router)


@app.get("/")
async def index() -> dict[str, str]:
    return {"service": "chat-agent", "status": "ok"}
