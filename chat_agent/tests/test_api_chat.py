import json

import pytest
from httpx import ASGITransport, AsyncClient

from chat_agent.core.config import AgentSettings, get_settings
from chat_agent.llm.main import app
from chat_agent.llm.services.chat_agent import AgentConfig
from chat_agent.llm.services.registry import AgentRegistry, get_agent_registry
from chat_agent.mcp.server import EXECUTIONS, load_tool_set


def _parse_sse(body: str) -> list:
    events = []
    for block in body.strip().split("\n\n"):
        assert block.startswith("data: ")
        data = block[len("data: "):]
        events.append(data if data == "[DONE]" else json.loads(data))
    return events


@pytest.fixture
def override_registry():
    def _install(registry: AgentRegistry) -> AgentRegistry:
        app.dependency_overrides[get_agent_registry] = lambda: registry
        return registry

    yield _install
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_chat_endpoint_streams_turn(override_registry, scripted_client, chunks):
    client = scripted_client(
        [
            [chunks.tool_call("call-1", "getLocalTime", {"location": "Lima"})],
            [chunks.text("Here is the result")],
        ]
    )
    config = AgentConfig(client=client, tools=await load_tool_set(), executions=EXECUTIONS)
    registry = override_registry(AgentRegistry(config, start_schedulers=False))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        response = await http.post(
            "/chat/session",
            json={"messages": [{"role": "user", "parts": [{"type": "text", "text": "time in Lima?"}]}]},
        )
        history = await http.get("/chat/session/messages")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["x-vercel-ai-ui-message-stream"] == "v1"
    events = _parse_sse(response.text)
    assert events[-1] == "[DONE]"
    types = [event["type"] for event in events[:-1]]
    assert types == [
        "start",
        "tool-input-available",
        "tool-output-available",
        "text-delta",
        "finish",
    ]
    assert events[1]["toolName"] == "getLocalTime"
    assert events[1]["input"] == {"location": "Lima"}

    stored = history.json()
    assert [message["role"] for message in stored] == ["user", "assistant"]
    tool_part = stored[1]["parts"][0]
    assert tool_part["toolCallId"] == "call-1"
    assert tool_part["state"] == "completed"
    assert (await registry.peek("session")) is not None


@pytest.mark.asyncio
async def test_clear_chat_session(override_registry, scripted_client):
    config = AgentConfig(client=scripted_client([]), tools=await load_tool_set(), executions=EXECUTIONS)
    registry = override_registry(AgentRegistry(config, start_schedulers=False))
    await registry.get("to-clear")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        cleared = await http.delete("/chat/to-clear")
        missing = await http.delete("/chat/to-clear")
        history = await http.get("/chat/to-clear/messages")

    assert cleared.status_code == 204
    assert missing.status_code == 404
    assert history.json() == []


@pytest.mark.asyncio
async def test_check_openai_key_reports_configuration():
    app.dependency_overrides[get_settings] = lambda: AgentSettings(openai_api_key="sk-test")
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
            configured = await http.get("/check-open-ai-key")
        app.dependency_overrides[get_settings] = lambda: AgentSettings(openai_api_key=None)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
            missing = await http.get("/check-open-ai-key")
    finally:
        app.dependency_overrides.clear()

    assert configured.json() == {"success": True}
    assert missing.json() == {"success": False}


@pytest.mark.asyncio
async def test_health_and_index():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        health = await http.get("/health/")
        index = await http.get("/")

    assert health.json()["status"] == "ok"
    assert index.json() == {"service": "chat-agent", "status": "ok"}
