"""Scheduling tools backed by the current agent's scheduler."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import Field

from ...core.context import get_current_agent
from ...core.logging_config import get_logger
from ...llm.schemas.schedule import (
    CronSchedule,
    Delayed,
    NoSchedule,
    ScheduleDescriptor,
    ScheduledAt,
)
from ..registry import mcp
from .utils import error_message

logger = get_logger(__name__)

TASK_CALLBACK = "execute_task"


def resolve_schedule_input(when: Any) -> datetime | int | str:
    """Pick the value the scheduler needs for this descriptor variant."""

    if isinstance(when, ScheduledAt):
        return when.date
    if isinstance(when, Delayed):
        return when.delay_in_seconds
    if isinstance(when, CronSchedule):
        return when.cron
    raise ValueError("not a valid schedule input")


async def schedule_task(description: str, when: ScheduleDescriptor) -> str:
    """Schedule a task to be executed at a later time."""

    if isinstance(when, NoSchedule):
        return "Not a valid schedule input"

    try:
        schedule_input = resolve_schedule_input(when)
        get_current_agent().schedule(schedule_input, TASK_CALLBACK, description)
    except Exception as exc:
        logger.exception("schedule_task_failed", schedule_type=getattr(when, "type", None))
        return error_message("scheduling task", exc)

    if isinstance(schedule_input, datetime):
        schedule_input = schedule_input.isoformat()
    return f'Task scheduled for type "{when.type}" : {schedule_input}'


async def get_scheduled_tasks() -> str | list[dict[str, Any]]:
    """List all tasks that have been scheduled."""

    try:
        tasks = get_current_agent().get_schedules()
    except Exception as exc:
        logger.exception("list_scheduled_tasks_failed")
        return error_message("listing scheduled tasks", exc)

    if not tasks:
        return "No scheduled tasks found."
    return [task.to_dict() for task in tasks]


async def cancel_scheduled_task(
    task_id: Annotated[str, Field(description="The ID of the task to cancel")],
) -> str:
    """Cancel a scheduled task using its ID."""

    try:
        cancelled = get_current_agent().cancel_schedule(task_id)
    except Exception as exc:
        logger.exception("cancel_scheduled_task_failed", task_id=task_id)
        return error_message(f"canceling task {task_id}", exc)

    if not cancelled:
        return f"Error canceling task {task_id}: task not found"
    return f"Task {task_id} has been successfully canceled."


mcp.tool(schedule_task, name="scheduleTask")
mcp.tool(get_scheduled_tasks, name="getScheduledTasks")
mcp.tool(cancel_scheduled_task, name="cancelScheduledTask")
