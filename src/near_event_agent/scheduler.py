"""Cron-style job scheduling on APScheduler's AsyncIOScheduler."""

from __future__ import annotations

import logging

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from near_event_agent.interfaces.scheduler import JobCallback

log = logging.getLogger(__name__)


def cron_trigger(expression: str) -> CronTrigger:
    """Build a trigger from a 5-field crontab or a 6-field (leading seconds) expression.

    Day-of-week values follow APScheduler numbering (0 = Monday).
    Raises ValueError for anything else.
    """
    fields = expression.split()
    if len(fields) == 5:
        return CronTrigger.from_crontab(expression, timezone="UTC")
    if len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone="UTC",
        )
    raise ValueError(
        f"Invalid cron expression '{expression}': expected 5 or 6 fields, got {len(fields)}"
    )


class APSchedulerJobScheduler:
    """JobScheduler backed by one shared AsyncIOScheduler.

    The scheduler starts lazily on the first job, inside the running event
    loop. Each job runs at most one instance at a time and missed runs
    coalesce into one.
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None) -> None:
        self._scheduler = scheduler or AsyncIOScheduler(timezone="UTC")

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self, cron_expression: str, callback: JobCallback, job_id: str) -> Job:
        trigger = cron_trigger(cron_expression)
        if not self._scheduler.running:
            self._scheduler.start()
            log.info("Job scheduler started")

        job = self._scheduler.add_job(
            callback,
            trigger,
            id=job_id,
            name=job_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        log.info("Scheduled %s with '%s'", job_id, cron_expression)
        return job

    def pause(self, handle: Job) -> None:
        handle.pause()
        log.debug("Paused job %s", handle.id)

    def resume(self, handle: Job) -> None:
        handle.resume()
        log.debug("Resumed job %s", handle.id)

    def stop(self, handle: Job) -> None:
        try:
            handle.remove()
        except JobLookupError:
            log.debug("Job %s already removed", handle.id)
            return
        log.debug("Removed job %s", handle.id)

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            log.info("Job scheduler stopped")
