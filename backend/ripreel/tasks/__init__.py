"""Celery application configuration."""

import asyncio
import threading

from celery import Celery

from ripreel.config import get_settings

settings = get_settings()

celery_app = Celery(
    "ripreel",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "ripreel.tasks.dispatch_tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
)

# One event loop per worker thread, reused across tasks
_thread_local = threading.local()


def run_async(coro):
    """Run a coroutine to completion from a sync Celery task."""
    loop = getattr(_thread_local, "loop", None)
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        _thread_local.loop = loop
    return loop.run_until_complete(coro)
