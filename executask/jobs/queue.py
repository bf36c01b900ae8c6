"""
Task queue abstraction for deferred work.

The backend is chosen by the TASK_BACKEND environment variable:

    TASK_BACKEND=local   # Sync execution in-process (development)
    TASK_BACKEND=celery  # Celery + Redis (production)

Work items are plain JSON payloads addressed by task name. Each item is routed to one of
three priority queues (critical, default, low) which workers drain in that order.
"""

import logging
import os
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Optional

from kombu.exceptions import KombuError

logger = logging.getLogger(__name__)


class JobPriority(str, Enum):
    """Priority tier, one broker queue per tier."""
    CRITICAL = "critical"
    DEFAULT = "default"
    LOW = "low"


class QueueError(Exception):
    """A work item could not be queued."""
    pass


class TaskQueue(ABC):
    """
    Abstract interface for async task execution.

    Implementations:
    - LocalTaskQueue: Sync execution for development/testing
    - CeleryTaskQueue: Celery + Redis
    """

    @abstractmethod
    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        priority: JobPriority = JobPriority.DEFAULT,
        delay_seconds: int = 0,
    ) -> str:
        """
        Queue a task for async execution.

        Args:
            task_name: Identifier for the task handler
            payload: JSON-serializable data passed to the task as keyword arguments
            priority: Queue tier
            delay_seconds: Delay before execution (0 = immediate)

        Returns:
            Task ID for tracking
        """
        pass

    def close(self) -> None:
        """Release broker connections."""
        pass


class CeleryTaskQueue(TaskQueue):
    """Queue tasks on the Redis broker through the Celery app."""

    def __init__(self, app=None):
        if app is None:
            from executask.jobs.celery_app import celery_app
            app = celery_app
        self.app = app

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        priority: JobPriority = JobPriority.DEFAULT,
        delay_seconds: int = 0,
    ) -> str:
        """Queue task via Celery."""
        task_id = str(uuid.uuid4())
        queue = JobPriority(priority).value

        logger.info(f"[CELERY] Queueing task {task_name} on {queue} (id={task_id})")

        try:
            self.app.send_task(
                task_name,
                kwargs=payload,
                queue=queue,
                countdown=delay_seconds or None,
                task_id=task_id,
            )
        except KombuError as e:
            raise QueueError(f"Failed to queue {task_name}: {e}") from e
        return task_id

    def close(self) -> None:
        self.app.close()


class LocalTaskQueue(TaskQueue):
    """
    Execute tasks synchronously in the same process.

    Intended for local development without Redis. Tasks run inside the caller's
    request or job, so they block it.
    """

    def __init__(self, handlers: Optional[Dict[str, Callable[[Dict[str, Any]], Any]]] = None):
        self.handlers = dict(handlers or {})

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        priority: JobPriority = JobPriority.DEFAULT,
        delay_seconds: int = 0,
    ) -> str:
        """Execute task synchronously."""
        task_id = str(uuid.uuid4())

        logger.info(f"[LOCAL] Executing task {task_name} (id={task_id})")

        if delay_seconds > 0:
            logger.warning(f"[LOCAL] delay_seconds={delay_seconds} ignored in local backend")

        handler = self.handlers.get(task_name)
        if handler is None:
            logger.warning(f"[LOCAL] No handler registered for task: {task_name}")
            return task_id

        result = handler(payload)
        logger.info(f"[LOCAL] Task {task_name} completed: {result}")
        return task_id


def build_task_queue(handlers: Optional[Dict[str, Callable[[Dict[str, Any]], Any]]] = None) -> TaskQueue:
    """Get the configured task backend based on TASK_BACKEND env var.

    Args:
        handlers: In-process handlers, used only by the local backend
    """
    backend = os.getenv("TASK_BACKEND", "local")

    if backend == "local":
        return LocalTaskQueue(handlers)
    elif backend == "celery":
        return CeleryTaskQueue()
    else:
        raise ValueError(f"Unknown TASK_BACKEND: {backend}")
