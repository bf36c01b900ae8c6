"""Celery tasks for ExecuTask."""

import logging
from dataclasses import asdict
from typing import Optional

from celery.signals import worker_process_shutdown

from executask.context import AppContext
from executask.jobs.celery_app import celery_app
from executask.jobs.notifications import SEND_NOTIFICATION_TASK, DeliveryOutcome, handle_notification
from executask.jobs.scheduler import RUN_SCHEDULED_JOB_TASK, run_scheduled_job
from executask.models.constants import MAX_NOTIFICATION_ATTEMPTS

logger = logging.getLogger(__name__)

RETRY_BACKOFF_SEC = 30

_context: Optional[AppContext] = None


def get_worker_context() -> AppContext:
    """The worker process's AppContext, built on first use."""
    global _context
    if _context is None:
        _context = AppContext.from_env()
    return _context


@worker_process_shutdown.connect
def close_worker_context(**kwargs):
    global _context
    if _context is not None:
        _context.close()
        _context = None


@celery_app.task(bind=True, name=SEND_NOTIFICATION_TASK, max_retries=MAX_NOTIFICATION_ATTEMPTS - 1)
def send_notification(self, **payload):
    """
    Deliver one queued notification.

    Transient failures are retried with exponential backoff; after the last attempt the item
    is dropped and logged.
    """
    attempt = self.request.retries + 1
    outcome = handle_notification(payload, get_worker_context(), attempt=attempt)
    if outcome is DeliveryOutcome.RETRY:
        raise self.retry(countdown=RETRY_BACKOFF_SEC * 2 ** self.request.retries)
    return outcome.value


@celery_app.task(name=RUN_SCHEDULED_JOB_TASK)
def run_scheduled_job_task(job_name):
    """Run a registered scheduled job (triggered by beat)."""
    result = run_scheduled_job(job_name, get_worker_context())
    return asdict(result)
