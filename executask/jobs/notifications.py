"""Notification work items and their consumer.

Scheduled jobs enqueue `NotificationJob`s through `NotificationDispatcher`; a worker turns each
one into an email. Delivery is retried a bounded number of times and then dropped.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel

from executask.database.todo_repository import CLOSED_STATUSES, TodoRepository
from executask.errors import NotFoundError
from executask.integrations.contacts import ContactLookupError
from executask.integrations.mailer import EmailDeliveryError
from executask.jobs.queue import JobPriority, QueueError, TaskQueue
from executask.models.constants import MAX_NOTIFICATION_ATTEMPTS
from executask.models.todo import Todo, TodoStats

logger = logging.getLogger(__name__)

SEND_NOTIFICATION_TASK = "executask.send_notification"

# Failures worth another attempt; anything else is a bug or a permanent condition.
RETRYABLE_ERRORS = (EmailDeliveryError, ContactLookupError, QueueError)


class NotificationKind(str, Enum):
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    WEEKLY_REPORT = "weekly_report"


class DeliveryOutcome(str, Enum):
    SENT = "sent"
    DROPPED = "dropped"
    RETRY = "retry"


class NotificationJob(BaseModel):
    """One queued notification. Weekly reports are per user and carry no todo."""

    user_id: str
    kind: NotificationKind
    todo_id: Optional[str] = None

    class Config:
        use_enum_values = True


class NotificationDropped(Exception):
    """The notification can never be delivered; do not retry."""
    pass


class NotificationDispatcher:
    """Enqueues notification jobs on the task queue."""

    def __init__(self, queue: TaskQueue):
        self.queue = queue

    def enqueue(self, job: NotificationJob, priority: JobPriority = JobPriority.DEFAULT) -> str:
        logger.debug(f"Enqueueing {job.kind} notification for user {job.user_id} (todo={job.todo_id})")
        return self.queue.send_task(SEND_NOTIFICATION_TASK, job.model_dump(), priority)


def _format_due(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "no due date"


def render_notification(
    job: NotificationJob,
    todo: Optional[Todo] = None,
    stats: Optional[TodoStats] = None,
) -> Tuple[str, str]:
    """Build the (subject, body) pair for a notification."""
    if job.kind == NotificationKind.DUE_SOON.value:
        subject = f"Reminder: \"{todo.title}\" is due soon"
        body = (
            f"Your todo \"{todo.title}\" is due {_format_due(todo.due_date)}.\n\n"
            f"Priority: {todo.priority}\n"
        )
    elif job.kind == NotificationKind.OVERDUE.value:
        subject = f"Overdue: \"{todo.title}\""
        body = (
            f"Your todo \"{todo.title}\" was due {_format_due(todo.due_date)} "
            f"and is still {todo.status}.\n"
        )
    else:
        subject = "Your weekly ExecuTask report"
        body = (
            "Here is where your todos stand this week:\n\n"
            f"  Active:    {stats.active}\n"
            f"  Draft:     {stats.draft}\n"
            f"  Completed: {stats.completed}\n"
            f"  Archived:  {stats.archived}\n"
            f"  Overdue:   {stats.overdue}\n"
            f"  Total:     {stats.total}\n"
        )
    return subject, body


def deliver_notification(job: NotificationJob, context, now: Optional[datetime] = None) -> None:
    """Load what the notification refers to, resolve the recipient and send the email.

    Raises:
        NotificationDropped: The todo or recipient no longer exists, or the reminder is moot
        EmailDeliveryError, ContactLookupError: Transient delivery failures
    """
    todo = None
    stats = None

    db = context.session_factory()
    try:
        repo = TodoRepository(db)
        if job.kind == NotificationKind.WEEKLY_REPORT.value:
            stats = repo.stats(job.user_id, now)
        else:
            if not job.todo_id:
                raise NotificationDropped(f"{job.kind} notification without a todo")
            try:
                todo = repo.get(job.user_id, job.todo_id)
            except NotFoundError:
                raise NotificationDropped(f"todo {job.todo_id} no longer exists")
            if todo.status in CLOSED_STATUSES:
                raise NotificationDropped(f"todo {job.todo_id} is already {todo.status}")
    finally:
        db.close()

    recipient = context.contact_resolver.resolve_email(job.user_id)
    if not recipient:
        raise NotificationDropped(f"no contact address for user {job.user_id}")

    subject, body = render_notification(job, todo=todo, stats=stats)
    context.email_sender.send(recipient, subject, body)


def handle_notification(
    payload: Dict[str, Any],
    context,
    attempt: int = 1,
    max_attempts: int = MAX_NOTIFICATION_ATTEMPTS,
) -> DeliveryOutcome:
    """Process one delivery attempt of a queued notification.

    Args:
        payload: Serialized NotificationJob
        context: AppContext supplying the session factory, contact resolver and email sender
        attempt: 1-based attempt number
        max_attempts: Attempts allowed before the item is dropped

    Returns:
        SENT on success, RETRY when a transient failure leaves attempts remaining,
        DROPPED when the item is terminal or out of attempts.
    """
    job = NotificationJob(**payload)
    try:
        deliver_notification(job, context)
    except NotificationDropped as e:
        logger.warning(f"Dropping {job.kind} notification for user {job.user_id}: {e}")
        return DeliveryOutcome.DROPPED
    except RETRYABLE_ERRORS as e:
        if attempt >= max_attempts:
            logger.error(
                f"Dropping {job.kind} notification for user {job.user_id} "
                f"after {attempt} attempts: {type(e).__name__}: {str(e)}",
                extra={"event": "notification_dropped", "user_id": job.user_id, "todo_id": job.todo_id},
            )
            return DeliveryOutcome.DROPPED
        logger.warning(
            f"Attempt {attempt}/{max_attempts} failed for {job.kind} notification "
            f"(user {job.user_id}): {type(e).__name__}: {str(e)}"
        )
        return DeliveryOutcome.RETRY

    logger.info(
        f"Sent {job.kind} notification to user {job.user_id}",
        extra={"event": "notification_sent", "user_id": job.user_id, "todo_id": job.todo_id},
    )
    return DeliveryOutcome.SENT
