# app/client/push.py
import json

import redis

from app.client.mirror import ClientMirror
from app.utils.settings import REDIS_URL, REALTIME_CHANNEL
from app.utils.logging import get_logger

logger = get_logger(__name__)


class PushListener:
    """Subskrypcja kanalu realtime, eventy przekazywane do mirrora."""

    def __init__(self, mirror: ClientMirror, url: str | None = None, channel: str | None = None):
        self.mirror = mirror
        self.channel = channel or REALTIME_CHANNEL
        self.redis = redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        self._thread = None

    def handle(self, message: dict) -> None:
        try:
            envelope = json.loads(message["data"])
            event, data = envelope["event"], envelope["data"]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed push message: {e}")
            return

        self.mirror.apply_push(event, data)

    def start(self) -> None:
        self.pubsub.subscribe(**{self.channel: self.handle})
        self._thread = self.pubsub.run_in_thread(sleep_time=1.0, daemon=True)
        logger.info(f"Listening on {self.channel}")

    def stop(self) -> None:
        if self._thread:
            self._thread.stop()
            self._thread = None
        self.pubsub.close()
