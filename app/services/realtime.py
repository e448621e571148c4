# app/services/realtime.py
import json
from typing import Any, Dict

import redis
from redis.exceptions import RedisError

from app.services.lock_service import redis_retry
from app.utils.settings import REDIS_URL, REALTIME_CHANNEL
from app.utils.logging import get_logger

logger = get_logger(__name__)

NOTIFICATION_NEW = "notification:new"
ORDER_NEW = "order:new"
ORDER_STATUS = "order:status"


class RealtimeChannel:
    """
    Redis pub/sub - push do klientow.
    At-most-once, best effort: klient zawsze moze odtworzyc stan przez GET.
    """

    def __init__(self, url: str | None = None, channel: str | None = None):
        self.redis = redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.channel = channel or REALTIME_CHANNEL

    @redis_retry()
    def _publish(self, message: str) -> int:
        return self.redis.publish(self.channel, message)

    def emit(self, event: str, data: Dict[str, Any]) -> bool:
        message = json.dumps({"event": event, "data": data})
        try:
            receivers = self._publish(message)
        except RedisError as e:
            logger.warning(f"Push {event} dropped: {e}")
            return False

        logger.info(f"Push {event} delivered to {receivers} subscriber(s)")
        return True
