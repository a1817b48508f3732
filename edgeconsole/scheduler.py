"""Periodic scan of scheduled actions."""
from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from edgeconsole.services import ScheduleService

logger = logging.getLogger(__name__)

SCAN_JOB_ID = 'scheduled_actions_scan'


def run_schedule_scan(schedule_service: ScheduleService) -> int:
    """Run one scan. Failures are logged and do not stop later scans."""
    try:
        return len(schedule_service.process_due())
    except Exception:
        logger.exception('Scheduled action scan failed')
        return 0


def create_scheduler(schedule_service: ScheduleService, interval_seconds: int = 60) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone='UTC')
    scheduler.add_job(
        run_schedule_scan,
        IntervalTrigger(seconds=interval_seconds),
        args=[schedule_service],
        id=SCAN_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler
