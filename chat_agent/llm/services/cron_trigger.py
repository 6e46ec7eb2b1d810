"""Service-level cron trigger configured through `CRON_TRIGGER`."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ...core.logging_config import get_logger
from .scheduler import Schedule, Scheduler

logger = get_logger(__name__)


class CronTrigger:
    """Fire `on_trigger` on a cron expression; currently only records the firing."""

    def __init__(self, cron: str, poll_interval: float = 1.0) -> None:
        self.cron = cron
        self.scheduler = Scheduler(self, poll_interval=poll_interval)

    def start(self) -> None:
        self.scheduler.schedule(self.cron, "on_trigger")
        self.scheduler.start()
        logger.info("cron_trigger_started", cron=self.cron)

    async def stop(self) -> None:
        await self.scheduler.stop()

    async def on_trigger(self, _payload: Any, schedule: Schedule) -> None:
        logger.info(
            "scheduled_trigger",
            triggered_at=datetime.now(tz=timezone.utc).isoformat(),
            cron=schedule.cron,
        )
