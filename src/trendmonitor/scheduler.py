"""Weekly recurring jobs on an asyncio loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

# Longest single sleep before the wall clock is checked again
MAX_SLEEP_SECONDS = 600.0


@dataclass(frozen=True, slots=True)
class RecurrenceRule:
    """Fires at hour:minute on the given weekdays (Monday = 0)."""

    days_of_week: frozenset[int]
    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not self.days_of_week or any(not 0 <= day <= 6 for day in self.days_of_week):
            raise ValueError(f"Invalid days_of_week: {sorted(self.days_of_week)!r}. Expected weekdays 0-6.")
        if not 0 <= self.hour <= 23:
            raise ValueError(f"Invalid hour: {self.hour!r}. Expected 0-23.")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Invalid minute: {self.minute!r}. Expected 0-59.")

    @classmethod
    def weekly(cls, days: Iterable[int], hour: int, minute: int = 0) -> RecurrenceRule:
        return cls(frozenset(days), hour, minute)

    def next_after(self, moment: datetime) -> datetime:
        """First fire time strictly after `moment`, in the same timezone."""
        base = moment.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        for offset in range(8):
            candidate = base + timedelta(days=offset)
            if candidate > moment and candidate.weekday() in self.days_of_week:
                return candidate
        raise AssertionError("unreachable: a weekly rule fires within eight days")

    def describe(self) -> str:
        days = "/".join(WEEKDAY_NAMES[day].capitalize() for day in sorted(self.days_of_week))
        return f"{days} {self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True, slots=True)
class ScheduledJob:
    name: str
    rule: RecurrenceRule
    action: Callable[[], Awaitable[object]]


class Scheduler:
    """Runs each job whenever its rule fires, one job at a time."""

    def __init__(
        self,
        jobs: Sequence[ScheduledJob],
        *,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.jobs = list(jobs)
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def fire(self, job: ScheduledJob) -> None:
        """Run a job now, waiting for any job already running."""
        async with self._lock:
            logger.info(f"Scheduled job triggered: {job.name}")
            try:
                await job.action()
            except Exception:
                logger.exception(f"Scheduled job {job.name} failed")

    async def _sleep_until(self, moment: datetime) -> None:
        # Wall time can jump across DST changes; re-read the clock after each short sleep
        while True:
            remaining = (moment - self._clock()).total_seconds()
            if remaining <= 0:
                return
            await self._sleep(min(remaining, MAX_SLEEP_SECONDS))

    async def _run_job_forever(self, job: ScheduledJob) -> None:
        last_fire: datetime | None = None
        while True:
            now = self._clock()
            # Never fire the same slot twice if the sleep returned early
            next_fire = job.rule.next_after(max(now, last_fire) if last_fire else now)
            logger.debug(f"Next {job.name} run at {next_fire:%Y-%m-%d %H:%M}")
            await self._sleep_until(next_fire)
            last_fire = next_fire
            await self.fire(job)

    async def run_forever(self) -> None:
        """Block until cancelled."""
        if not self.jobs:
            raise ValueError("Scheduler has no jobs to run.")
        summary = ", ".join(f"{job.name} at {job.rule.describe()}" for job in self.jobs)
        logger.info(f"Scheduler started: {summary}. Press Ctrl+C to stop.")
        await asyncio.gather(*(self._run_job_forever(job) for job in self.jobs))
