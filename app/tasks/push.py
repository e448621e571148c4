# app/tasks/push.py
from typing import Any, Dict

from kombu.exceptions import OperationalError

from app.celery_worker import celery_app
from app.services.realtime import RealtimeChannel
from app.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="app.tasks.push.push_event_task")
def push_event_task(event: str, data: Dict[str, Any]):
    """Celery task - publikuje event na kanale realtime."""
    delivered = RealtimeChannel().emit(event, data)
    return {"event": event, "delivered": delivered}


class EventDispatcher:
    """
    Przekazuje eventy do Celery, request nie czeka na Redisa.
    Brak brokera = event przepada (push to optymalizacja, nie zrodlo prawdy).
    """

    def emit(self, event: str, data: Dict[str, Any]) -> bool:
        try:
            push_event_task.delay(event, data)
        except OperationalError as e:
            logger.warning(f"Event {event} not queued: {e}")
            return False
        return True
