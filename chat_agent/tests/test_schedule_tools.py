from datetime import datetime, timezone

import pytest

from chat_agent.core.context import agent_context
from chat_agent.llm.schemas.schedule import CronSchedule, Delayed, NoSchedule, ScheduledAt
from chat_agent.llm.services.chat_agent import AgentConfig, ChatAgent
from chat_agent.mcp.server import call_tool
from chat_agent.mcp.tools.schedule import (
    cancel_scheduled_task,
    get_scheduled_tasks,
    resolve_schedule_input,
    schedule_task,
)
from chat_agent.mcp.toolset import ToolSet


def _agent(scripted_client) -> ChatAgent:
    config = AgentConfig(client=scripted_client([]), tools=ToolSet(), executions={})
    return ChatAgent("schedule-test", config)


def test_resolve_schedule_input_per_variant():
    when = datetime(2030, 1, 1, tzinfo=timezone.utc)

    assert resolve_schedule_input(ScheduledAt(date=when)) == when
    assert resolve_schedule_input(Delayed(delay_in_seconds=30)) == 30
    assert resolve_schedule_input(CronSchedule(cron="0 9 * * *")) == "0 9 * * *"
    with pytest.raises(ValueError):
        resolve_schedule_input(NoSchedule())


@pytest.mark.asyncio
async def test_no_schedule_returns_message_without_scheduling(scripted_client):
    agent = _agent(scripted_client)

    with agent_context(agent):
        result = await schedule_task(description="x", when=NoSchedule())

    assert result == "Not a valid schedule input"
    assert agent.get_schedules() == []


@pytest.mark.asyncio
async def test_cron_schedule_is_registered(scripted_client):
    agent = _agent(scripted_client)

    with agent_context(agent):
        result = await schedule_task(description="x", when=CronSchedule(cron="* * * * *"))

    assert "scheduled" in result
    assert "* * * * *" in result
    [entry] = agent.get_schedules()
    assert entry.type == "cron"
    assert entry.callback == "execute_task"
    assert entry.payload == "x"


@pytest.mark.asyncio
async def test_invalid_cron_returns_error_string(scripted_client):
    agent = _agent(scripted_client)

    with agent_context(agent):
        result = await schedule_task(description="x", when=CronSchedule(cron="not a cron"))

    assert result.startswith("Error scheduling task:")
    assert agent.get_schedules() == []


@pytest.mark.asyncio
async def test_schedule_without_agent_returns_error_string():
    result = await schedule_task(description="x", when=Delayed(delay_in_seconds=5))

    assert result.startswith("Error scheduling task:")


@pytest.mark.asyncio
async def test_list_and_cancel_scheduled_tasks(scripted_client):
    agent = _agent(scripted_client)

    with agent_context(agent):
        assert await get_scheduled_tasks() == "No scheduled tasks found."
        await schedule_task(description="ping", when=Delayed(delay_in_seconds=60))
        [task] = await get_scheduled_tasks()
        assert task["type"] == "delayed"
        assert task["delayInSeconds"] == 60

        assert await cancel_scheduled_task(task["id"]) == (
            f"Task {task['id']} has been successfully canceled."
        )
        missing = await cancel_scheduled_task(task["id"])

    assert missing.startswith(f"Error canceling task {task['id']}")
    assert agent.get_schedules() == []


@pytest.mark.asyncio
async def test_schedule_tool_through_registry_accepts_model_payload(scripted_client):
    agent = _agent(scripted_client)

    with agent_context(agent):
        result = await call_tool(
            "scheduleTask",
            {"description": "stretch", "when": {"type": "delayed", "delayInSeconds": 120}},
        )

    assert result == 'Task scheduled for type "delayed" : 120'
    [entry] = agent.get_schedules()
    assert entry.payload == "stretch"


@pytest.mark.asyncio
async def test_scheduled_date_is_registered_in_utc(scripted_client):
    agent = _agent(scripted_client)

    with agent_context(agent):
        result = await schedule_task(
            description="renew passport", when=ScheduledAt(date=datetime(2030, 5, 1, 9, 30))
        )

    assert result == 'Task scheduled for type "scheduled" : 2030-05-01T09:30:00'
    [entry] = agent.get_schedules()
    assert entry.type == "scheduled"
    assert entry.time == datetime(2030, 5, 1, 9, 30, tzinfo=timezone.utc)
    assert entry.payload == "renew passport"
