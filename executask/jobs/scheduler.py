"""Scheduled background jobs.

Each job selects a batch of work from the database and enqueues one notification per item.
Jobs are registered in `SCHEDULED_JOBS` with a cron expression; the Celery beat schedule is
built from that registry.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, TypeVar

from celery.schedules import crontab

from executask.database.todo_repository import TodoRepository
from executask.jobs.notifications import NotificationDispatcher, NotificationJob, NotificationKind
from executask.jobs.queue import JobPriority
from executask.models.constants import (
    DEFAULT_JOB_BATCH_SIZE,
    DEFAULT_REMINDER_WINDOW_HOURS,
    WEEKLY_REPORT_LOOKBACK_DAYS,
)

logger = logging.getLogger(__name__)

RUN_SCHEDULED_JOB_TASK = "executask.run_scheduled_job"

# Due-date slice covered by one reminder run. Equals the hourly schedule of due_date_reminders,
# so consecutive runs select disjoint slices and each todo is reminded once.
REMINDER_SLICE = timedelta(hours=1)

T = TypeVar("T")


@dataclass
class JobResult:
    """Counts reported by one run of a scheduled job."""
    name: str
    selected: int = 0
    enqueued: int = 0
    failed: int = 0


@dataclass(frozen=True)
class JobSettings:
    reminder_window: timedelta
    batch_size: int

    @classmethod
    def from_env(cls) -> "JobSettings":
        return cls(
            reminder_window=timedelta(
                hours=int(os.getenv("REMINDER_WINDOW_HOURS", str(DEFAULT_REMINDER_WINDOW_HOURS)))
            ),
            batch_size=int(os.getenv("JOB_BATCH_SIZE", str(DEFAULT_JOB_BATCH_SIZE))),
        )


JobFunction = Callable[[datetime, TodoRepository, NotificationDispatcher, timedelta, int], JobResult]


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    schedule: str  # cron: minute hour day-of-month month day-of-week (UTC)
    run: JobFunction


def _enqueue_each(
    name: str,
    items: Iterable[T],
    make_job: Callable[[T], NotificationJob],
    dispatcher: NotificationDispatcher,
    priority: JobPriority,
) -> JobResult:
    """Enqueue one notification per item; a failed enqueue is counted and skipped."""
    result = JobResult(name=name)
    for item in items:
        result.selected += 1
        job = make_job(item)
        try:
            dispatcher.enqueue(job, priority)
            result.enqueued += 1
        except Exception as e:
            result.failed += 1
            logger.error(
                f"{name}: failed to enqueue {job.kind} notification for user {job.user_id} "
                f"(todo={job.todo_id}): {type(e).__name__}: {str(e)}"
            )
    return result


def due_date_reminders(
    now: datetime,
    repo: TodoRepository,
    dispatcher: NotificationDispatcher,
    window: timedelta,
    batch_size: int,
) -> JobResult:
    """Remind owners of open todos as their due date enters the reminder window.

    Each run covers the todos due in the last REMINDER_SLICE of the window, so a todo
    is reminded roughly `window` ahead of its due date and only by one run.
    """
    end = now + window
    start = max(now, end - REMINDER_SLICE)
    todos = repo.list_due_between(start, end, batch_size)
    return _enqueue_each(
        "due_date_reminders",
        todos,
        lambda todo: NotificationJob(user_id=todo.user_id, kind=NotificationKind.DUE_SOON, todo_id=todo.id),
        dispatcher,
        JobPriority.DEFAULT,
    )


def overdue_notifications(
    now: datetime,
    repo: TodoRepository,
    dispatcher: NotificationDispatcher,
    window: timedelta,
    batch_size: int,
) -> JobResult:
    """Notify owners of open todos past their due date."""
    todos = repo.list_overdue(now, batch_size)
    return _enqueue_each(
        "overdue_notifications",
        todos,
        lambda todo: NotificationJob(user_id=todo.user_id, kind=NotificationKind.OVERDUE, todo_id=todo.id),
        dispatcher,
        JobPriority.CRITICAL,
    )


def weekly_reports(
    now: datetime,
    repo: TodoRepository,
    dispatcher: NotificationDispatcher,
    window: timedelta,
    batch_size: int,
) -> JobResult:
    """Send a summary to every user who touched a todo in the past week."""
    since = now - timedelta(days=WEEKLY_REPORT_LOOKBACK_DAYS)
    user_ids = repo.list_recently_active_user_ids(since, batch_size)
    return _enqueue_each(
        "weekly_reports",
        user_ids,
        lambda user_id: NotificationJob(user_id=user_id, kind=NotificationKind.WEEKLY_REPORT),
        dispatcher,
        JobPriority.LOW,
    )


SCHEDULED_JOBS: Dict[str, ScheduledJob] = {
    job.name: job
    for job in (
        ScheduledJob("due_date_reminders", "0 * * * *", due_date_reminders),
        ScheduledJob("overdue_notifications", "0 9 * * *", overdue_notifications),
        ScheduledJob("weekly_reports", "0 8 * * 1", weekly_reports),
    )
}


def parse_cron(expression: str) -> crontab:
    """Parse a five-field cron expression into a Celery crontab."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Invalid cron expression (expected 5 fields): {expression!r}")
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


def build_beat_schedule() -> dict:
    """Celery beat entries, one per registered job."""
    return {
        name.replace("_", "-"): {
            "task": RUN_SCHEDULED_JOB_TASK,
            "schedule": parse_cron(job.schedule),
            "args": (name,),
            "options": {"queue": JobPriority.DEFAULT.value},
        }
        for name, job in SCHEDULED_JOBS.items()
    }


def run_scheduled_job(name: str, context, now: datetime = None) -> JobResult:
    """Run one registered job against the context's database and task queue.

    Args:
        name: Key in SCHEDULED_JOBS
        context: AppContext
        now: Reference time (naive UTC); defaults to the current time
    """
    job = SCHEDULED_JOBS.get(name)
    if job is None:
        raise ValueError(f"Unknown scheduled job: {name}")

    now = now or datetime.utcnow()
    dispatcher = NotificationDispatcher(context.task_queue)
    settings = JobSettings.from_env()

    db = context.session_factory()
    try:
        result = job.run(now, TodoRepository(db), dispatcher, settings.reminder_window, settings.batch_size)
    finally:
        db.close()

    logger.info(
        f"Scheduled job {name} finished: selected={result.selected} "
        f"enqueued={result.enqueued} failed={result.failed}",
        extra={
            "event": "scheduled_job_finished",
            "job_name": result.name,
            "selected": result.selected,
            "enqueued": result.enqueued,
            "failed": result.failed,
        },
    )
    return result
