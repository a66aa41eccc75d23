"""Event worker process.

RUN:  python -m classroom.worker

Drains the queues the progress engine publishes to and hands each event
to the notification layer.  Notifications are outside this service, so
the handlers here log the event in a form the notifier can tail.

Same image as the API, different command:
  api:    uvicorn classroom.main:app --host 0.0.0.0 --port 8000
  worker: python -m classroom.worker
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from classroom.core.config import SETTINGS
from classroom.core.logging import setup_logging
from classroom.services.events import CLASS_COMPLETED, MODULE_COMPLETED, queue_backlog
from classroom.services.task_queue import task_queue

TaskHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("worker")

# Seconds to wait when every queue came back empty.
IDLE_SLEEP = 1.0

HANDLERS: dict[str, TaskHandler] = {}


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


@register_handler(CLASS_COMPLETED)
async def handle_class_completed(payload: dict) -> None:
    logger.info(
        "Class completed: class=%s user=%s at=%s badges=%s",
        payload.get("class_id"),
        payload.get("user_id"),
        payload.get("completed_at"),
        payload.get("badges_granted", []),
        extra={"class_id": payload.get("class_id"), "user_id": payload.get("user_id")},
    )


@register_handler(MODULE_COMPLETED)
async def handle_module_completed(payload: dict) -> None:
    logger.info(
        "Module completed: class=%s user=%s week=%s",
        payload.get("class_id"),
        payload.get("user_id"),
        payload.get("week_number"),
        extra={"class_id": payload.get("class_id"), "user_id": payload.get("user_id")},
    )


async def drain_once() -> int:
    """Pull at most one task from each queue and dispatch it.  Returns tasks handled."""
    handled = 0
    for queue_name, handler in HANDLERS.items():
        task = await task_queue.dequeue(queue_name, timeout=1)
        if task is None:
            continue
        handled += 1
        try:
            await handler(task.payload)
            logger.info("Task %s on [%s] completed", task.id, queue_name)
        except Exception:
            # At-most-once delivery: a failed event is logged and dropped.
            logger.exception("Task %s on [%s] failed", task.id, queue_name)
    return handled


async def run_worker() -> None:
    """Poll all registered queues and dispatch tasks to handlers."""
    logger.info(
        "Worker started, listening on queues: %s backlog=%s",
        list(HANDLERS),
        await queue_backlog(),
    )
    while True:
        if not await drain_once():
            await asyncio.sleep(IDLE_SLEEP)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
