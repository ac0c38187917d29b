# flowershop/services/notification_service.py
import asyncio
from typing import Any, Dict, Set

from flowershop.celery_worker import celery_app
from flowershop.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_CREATED = "order.created"
ORDER_STATUS_CHANGED = "order.status_changed"


class NotificationService:
    """
    Hands order events to the notification workers through Celery.

    Best effort: the order is already committed when emit() runs, so a
    broker outage is logged and otherwise ignored. The Celery publish is a
    blocking call, it runs in a worker thread and the caller never waits
    for it.
    """

    # shared by every instance: one is built per request and may be gone
    # before its publish finishes
    _pending: Set[asyncio.Task] = set()

    def emit(self, event_name: str, payload: Dict[str, Any]) -> asyncio.Task:
        """Schedules the publish and returns at once. The task resolves to True/False."""
        task = asyncio.get_running_loop().create_task(self._publish(event_name, payload))
        # the loop keeps only weak references to tasks
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Waits for every publish still in flight (shutdown, tests)."""
        if self._pending:
            await asyncio.gather(*self._pending)

    async def _publish(self, event_name: str, payload: Dict[str, Any]) -> bool:
        try:
            await asyncio.to_thread(deliver_order_event_task.delay, event_name, payload)
        except Exception as e:
            logger.warning(f"Could not publish {event_name} for order {payload.get('order_id')}: {e}")
            return False
        return True


@celery_app.task(name="flowershop.services.notification_service.deliver_order_event_task")
def deliver_order_event_task(event_name: str, payload: Dict[str, Any]):
    """
    Worker side. Email/SMS delivery and stock adjustment live in their own
    services; here the event is only logged and acknowledged.
    """
    logger.info(f"[NOTIFICATION] {event_name}: order {payload.get('order_id')} -> {payload.get('status')}")
    return {"event": event_name, "order_id": payload.get("order_id"), "status": "sent"}
