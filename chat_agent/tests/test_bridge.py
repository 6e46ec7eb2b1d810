import pytest
from httpx import ASGITransport, AsyncClient

from chat_agent.bridge.main import app
from chat_agent.core.config import AgentSettings, get_settings


@pytest.fixture
def bridge_client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://bridge")


@pytest.mark.asyncio
async def test_bridge_liveness(bridge_client):
    async with bridge_client as http:
        response = await http.get("/")

    assert response.status_code == 200
    assert "Local Bridge Active" in response.text


@pytest.mark.asyncio
async def test_exec_known_tool_echoes_params(bridge_client):
    async with bridge_client as http:
        response = await http.post("/exec", json={"tool": "pixelDetect", "params": {"a": 1}})

    assert response.status_code == 200
    assert response.json() == {"result": "Pixel detection simulated.", "params": {"a": 1}}


@pytest.mark.asyncio
async def test_exec_unknown_tool_is_rejected(bridge_client):
    async with bridge_client as http:
        response = await http.post("/exec", json={"tool": "nope"})

    assert response.status_code == 400
    assert response.json() == {"error": "Unknown tool"}


@pytest.mark.asyncio
async def test_sync_lists_resource_directory(bridge_client, tmp_path):
    (tmp_path / "b.png").write_bytes(b"")
    (tmp_path / "a.json").write_text("{}")
    app.dependency_overrides[get_settings] = lambda: AgentSettings(bridge_resource_dir=str(tmp_path))
    try:
        async with bridge_client as http:
            response = await http.get("/sync")
    finally:
        app.dependency_overrides.clear()

    assert response.json() == {"files": ["a.json", "b.png"]}


@pytest.mark.asyncio
async def test_sync_missing_directory_returns_404(bridge_client, tmp_path):
    missing = tmp_path / "absent"
    app.dependency_overrides[get_settings] = lambda: AgentSettings(bridge_resource_dir=str(missing))
    try:
        async with bridge_client as http:
            response = await http.get("/sync")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"params": {"a": 1}}, {"tool": 5}, {"tool": None}])
async def test_exec_missing_or_non_string_tool_is_unknown(bridge_client, body):
    async with bridge_client as http:
        response = await http.post("/exec", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Unknown tool"}


@pytest.mark.asyncio
async def test_exec_echoes_explicit_null_params(bridge_client):
    async with bridge_client as http:
        with_null = await http.post("/exec", json={"tool": "mapSonar", "params": None})
        without = await http.post("/exec", json={"tool": "mapSonar"})

    assert with_null.json() == {"result": "Sonar mapping complete.", "params": None}
    assert without.json() == {"result": "Sonar mapping complete."}
