"""Outbound engine events.

class_completed   : an enrollment flipped active -> completed
module_completed  : a learner's module flipped incomplete -> completed

Publishing is best-effort: a queue outage is logged and the write that
caused the event still succeeds.

Inside publish_after_commit() events are held back until the block exits
cleanly, so a rolled-back transaction publishes nothing.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from uuid import UUID

from redis.exceptions import RedisError

from classroom.core.metrics import EVENTS_PUBLISHED
from classroom.services.task_queue import task_queue

logger = logging.getLogger(__name__)

CLASS_COMPLETED = "class_completed"
MODULE_COMPLETED = "module_completed"
EVENT_QUEUES = (CLASS_COMPLETED, MODULE_COMPLETED)

_pending: ContextVar[list[tuple[str, dict]] | None] = ContextVar(
    "pending_events", default=None
)


@asynccontextmanager
async def publish_after_commit() -> AsyncIterator[None]:
    pending: list[tuple[str, dict]] = []
    token = _pending.set(pending)
    try:
        yield
    finally:
        _pending.reset(token)
    for queue, payload in pending:
        await _publish(queue, payload)


async def _publish(queue: str, payload: dict) -> None:
    pending = _pending.get()
    if pending is not None:
        pending.append((queue, payload))
        return
    await _enqueue(queue, payload)


async def _enqueue(queue: str, payload: dict) -> None:
    try:
        task = await task_queue.enqueue(queue, payload)
    except RedisError:
        logger.exception("Failed to publish %s event payload=%s", queue, payload)
        return
    EVENTS_PUBLISHED.labels(queue=queue).inc()
    logger.debug("Published %s task=%s", queue, task.id)


async def queue_backlog() -> dict[str, int]:
    """Pending events per queue; empty when the queue backend is unreachable."""
    try:
        return {q: await task_queue.queue_length(q) for q in EVENT_QUEUES}
    except RedisError:
        logger.exception("Could not read event queue backlog")
        return {}


async def publish_class_completed(
    class_id: UUID,
    user_id: str,
    completed_at: int,
    badges_granted: tuple[str, ...] = (),
) -> None:
    await _publish(
        CLASS_COMPLETED,
        {
            "class_id": str(class_id),
            "user_id": user_id,
            "completed_at": completed_at,
            "badges_granted": list(badges_granted),
        },
    )


async def publish_module_completed(
    class_id: UUID,
    user_id: str,
    module_id: UUID,
    week_number: int,
    completed_at: int | None,
) -> None:
    await _publish(
        MODULE_COMPLETED,
        {
            "class_id": str(class_id),
            "user_id": user_id,
            "module_id": str(module_id),
            "week_number": week_number,
            "completed_at": completed_at,
        },
    )
