"""In-memory task scheduler that dispatches due schedules to an owner's callbacks."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Literal
from uuid import uuid4

from croniter import croniter

from ...core.logging_config import get_logger

logger = get_logger(__name__)

ScheduleType = Literal["scheduled", "delayed", "cron"]
ScheduleWhen = datetime | int | str


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_cron_time(expr: str, base_time: datetime) -> datetime:
    """Return the first cron fire time strictly after `base_time`."""

    expr = str(expr or "").strip()
    if not expr:
        raise ValueError("Cron expression must not be empty")
    return croniter(expr, base_time).get_next(datetime)


@dataclass(slots=True)
class Schedule:
    id: str
    callback: str
    payload: Any
    type: ScheduleType
    time: datetime
    cron: str | None = None
    delay_in_seconds: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "callback": self.callback,
            "payload": self.payload,
            "type": self.type,
            "time": self.time.isoformat(),
        }
        if self.cron is not None:
            data["cron"] = self.cron
        if self.delay_in_seconds is not None:
            data["delayInSeconds"] = self.delay_in_seconds
        return data


class Scheduler:
    """Keep schedules for one owner and invoke `owner.<callback>(payload, schedule)`.

    One-time schedules (`scheduled`, `delayed`) are dropped after they fire;
    cron schedules advance to their next fire time.
    """

    def __init__(self, owner: Any, poll_interval: float = 1.0) -> None:
        self._owner = owner
        self._poll_interval = poll_interval
        self._schedules: dict[str, Schedule] = {}
        self._worker: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

    def schedule(self, when: ScheduleWhen, callback: str, payload: Any = None) -> Schedule:
        if not callable(getattr(self._owner, callback, None)):
            msg = f"Callback {callback!r} is not defined on {type(self._owner).__name__}"
            raise ValueError(msg)

        now = _utcnow()
        if isinstance(when, datetime):
            entry = Schedule(
                id=uuid4().hex[:12],
                callback=callback,
                payload=payload,
                type="scheduled",
                time=_as_utc(when),
            )
        elif isinstance(when, int) and not isinstance(when, bool):
            if when < 0:
                raise ValueError("Delay must be a non-negative number of seconds")
            entry = Schedule(
                id=uuid4().hex[:12],
                callback=callback,
                payload=payload,
                type="delayed",
                time=now + timedelta(seconds=when),
                delay_in_seconds=when,
            )
        elif isinstance(when, str):
            entry = Schedule(
                id=uuid4().hex[:12],
                callback=callback,
                payload=payload,
                type="cron",
                time=next_cron_time(when, now),
                cron=when.strip(),
            )
        else:
            msg = f"Invalid schedule input: {when!r}"
            raise ValueError(msg)

        self._schedules[entry.id] = entry
        logger.info(
            "schedule_created",
            schedule_id=entry.id,
            schedule_type=entry.type,
            callback=callback,
            next_run=entry.time.isoformat(),
        )
        return entry

    def get_schedules(self) -> list[Schedule]:
        return sorted(self._schedules.values(), key=lambda item: item.time)

    def get_schedule(self, schedule_id: str) -> Schedule | None:
        return self._schedules.get(schedule_id)

    def cancel(self, schedule_id: str) -> bool:
        removed = self._schedules.pop(schedule_id, None) is not None
        logger.info("schedule_cancelled", schedule_id=schedule_id, found=removed)
        return removed

    async def run_due(self, now: datetime | None = None) -> int:
        """Dispatch every schedule due at `now`; returns how many fired."""

        now = _as_utc(now) if now else _utcnow()
        due = sorted(
            (item for item in self._schedules.values() if item.time <= now),
            key=lambda item: item.time,
        )
        for item in due:
            if item.type == "cron" and item.cron:
                item.time = next_cron_time(item.cron, now)
            else:
                self._schedules.pop(item.id, None)
            await self._dispatch(item)
        return len(due)

    async def _dispatch(self, item: Schedule) -> None:
        handler = getattr(self._owner, item.callback)
        logger.info("schedule_fired", schedule_id=item.id, callback=item.callback)
        try:
            await handler(item.payload, item)
        except Exception:
            logger.exception("schedule_callback_failed", schedule_id=item.id, callback=item.callback)

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._worker = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        if not self._worker:
            return
        self._stop_event.set()
        await self._worker
        self._worker = None

    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.run_due()
            except Exception:
                logger.exception("scheduler_tick_failed")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass
