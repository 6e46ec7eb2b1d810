"""Configuration management for the chat agent service."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parents[2]
# The repository root .env wins, the runtime working directory is the fallback.
_ENV_FILE_CANDIDATES: tuple[str, ...] = (
    str(_REPO_ROOT / ".env"),
    ".env",
)


class AgentSettings(BaseSettings):
    """Centralised configuration derived from environment variables."""

    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = Field(
        None,
        description="Log file path; leave empty to log to stdout only",
    )

    agent_host: str = Field("0.0.0.0", description="FastAPI bind host")
    agent_port: int = Field(8787, description="FastAPI bind port")

    openai_api_key: SecretStr | None = Field(
        None,
        description="OpenAI API key; a missing key is logged, not enforced",
    )
    openai_api_base: AnyHttpUrl | None = Field(
        None, description="Override for the OpenAI-compatible API endpoint"
    )
    openai_model: str = Field("gpt-4o-2024-11-20", description="Chat completion model")
    max_steps: int = Field(10, ge=1, description="Model steps allowed per chat turn")

    scheduler_poll_interval: float = Field(
        1.0, gt=0, description="Seconds between scheduler due-task checks"
    )
    cron_trigger: str | None = Field(
        None, description="Cron expression for the service-level scheduled trigger"
    )

    bridge_host: str = Field("127.0.0.1", description="Local bridge bind host")
    bridge_port: int = Field(8788, description="Local bridge bind port")
    bridge_resource_dir: str = Field(
        "./resources", description="Directory listed by the local bridge /sync endpoint"
    )

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_CANDIDATES,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def has_openai_key(self) -> bool:
        """Return True when a non-empty OpenAI key is configured."""

        return bool(self.openai_api_key and self.openai_api_key.get_secret_value())


@lru_cache
def get_settings() -> AgentSettings:
    """Return a cached AgentSettings instance."""

    return AgentSettings()


def resolved_env_file() -> str | None:
    """Return the first readable .env file from the candidate list."""

    for candidate in _ENV_FILE_CANDIDATES:
        path = Path(candidate).expanduser()
        if path.is_file():
            return str(path)
    return None


def env_file_candidates() -> tuple[str, ...]:
    """Expose configured env file search order for diagnostics."""

    return _ENV_FILE_CANDIDATES
