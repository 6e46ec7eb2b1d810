from chat_agent.core.config import AgentSettings
from chat_agent.llm.services.openai_client import OpenAIClient


def test_agent_settings_reads_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-live-key")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("MAX_STEPS", "4")
    monkeypatch.setenv("CRON_TRIGGER", "*/5 * * * *")

    settings = AgentSettings()

    assert settings.openai_api_key.get_secret_value() == "sk-live-key"
    assert settings.has_openai_key()
    assert settings.openai_model == "gpt-4o-mini"
    assert settings.max_steps == 4
    assert settings.cron_trigger == "*/5 * * * *"


def test_missing_api_key_is_allowed(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    settings = AgentSettings(_env_file=None)

    assert settings.openai_api_key is None
    assert not settings.has_openai_key()
    assert settings.openai_model == "gpt-4o-2024-11-20"
    assert settings.max_steps == 10


def test_openai_client_from_settings_defers_sdk_construction():
    settings = AgentSettings(
        _env_file=None,
        openai_api_key="sk-abcdef123456",
        openai_api_base="https://llm.example.com/v1/",
        openai_model="gpt-4o-mini",
    )

    client = OpenAIClient.from_settings(settings)

    assert client.model == "gpt-4o-mini"
    assert client._base_url == "https://llm.example.com/v1"
    assert client._client is None
