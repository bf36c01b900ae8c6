"""
Celery configuration for ExecuTask background workers.

Run a worker draining the priority queues, and beat for the schedule:

    celery -A executask.jobs.celery_app worker -Q critical,default,low
    celery -A executask.jobs.celery_app beat
"""

import os

from celery import Celery
from celery.signals import setup_logging
from dotenv import load_dotenv
from kombu import Queue

from executask.jobs.queue import JobPriority
from executask.jobs.scheduler import build_beat_schedule
from executask.logging_config import LoggingConfig

load_dotenv()

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

celery_app = Celery("executask", broker=REDIS_URL, include=["executask.jobs.tasks"])

celery_app.conf.update(
    task_queues=[Queue(priority.value) for priority in JobPriority],
    task_default_queue=JobPriority.DEFAULT.value,
    # Redis has no native priorities; poll queues in declaration order instead.
    broker_transport_options={"queue_order_strategy": "priority"},
    task_serializer="json",
    accept_content=["json"],
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_ignore_result=True,
    timezone="UTC",
    enable_utc=True,
)

# Celery Beat Schedule
celery_app.conf.beat_schedule = build_beat_schedule()


@setup_logging.connect
def configure_logging(**kwargs):
    LoggingConfig.setup_logging()
