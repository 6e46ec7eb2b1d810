"""Schedule descriptors accepted by the scheduling tool."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class NoSchedule(BaseModel):
    type: Literal["no-schedule"] = "no-schedule"


class ScheduledAt(BaseModel):
    type: Literal["scheduled"] = "scheduled"
    date: datetime = Field(..., description="When the task should run (ISO 8601)")


class Delayed(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["delayed"] = "delayed"
    delay_in_seconds: int = Field(
        ..., alias="delayInSeconds", ge=0, description="Seconds to wait before running"
    )


class CronSchedule(BaseModel):
    type: Literal["cron"] = "cron"
    cron: str = Field(..., description="Cron expression for a recurring task")


ScheduleDescriptor = Annotated[
    NoSchedule | ScheduledAt | Delayed | CronSchedule,
    Field(discriminator="type"),
]
