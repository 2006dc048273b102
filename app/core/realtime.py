"""Thread-safe in-process publish/subscribe hub for quest board and chat push channels."""
import itertools
import logging
import threading
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

Callback = Callable[[Dict[str, Any]], None]


BOARD_CHANNEL = "board"


def messages_channel(quest_id: str) -> str:
    return f"quest:{quest_id}:messages"


def reads_channel(quest_id: str) -> str:
    return f"quest:{quest_id}:reads"


class Subscription:
    """Handle returned by RealtimeHub.subscribe. unsubscribe() may be called more than once."""

    def __init__(self, hub: "RealtimeHub", channel: str, subscription_id: int):
        self._hub = hub
        self.channel = channel
        self.id = subscription_id
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._hub._remove(self.channel, self.id)


class RealtimeHub:
    def __init__(self):
        self._lock = threading.Lock()
        # Publishing holds this lock so deliveries on one channel never interleave
        self._publish_lock = threading.RLock()
        self._ids = itertools.count(1)
        self._channels: Dict[str, Dict[int, Callback]] = {}

    def subscribe(self, channel: str, callback: Callback) -> Subscription:
        with self._lock:
            subscription_id = next(self._ids)
            self._channels.setdefault(channel, {})[subscription_id] = callback
        logger.debug(f"Subscribed {subscription_id} to {channel}")
        return Subscription(self, channel, subscription_id)

    def _remove(self, channel: str, subscription_id: int) -> None:
        with self._lock:
            callbacks = self._channels.get(channel)
            if callbacks is None:
                return
            callbacks.pop(subscription_id, None)
            if not callbacks:
                del self._channels[channel]
        logger.debug(f"Unsubscribed {subscription_id} from {channel}")

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._channels.get(channel, {}))

    def publish(self, channel: str, payload: Dict[str, Any]) -> int:
        """Deliver payload to every current subscriber of channel. Returns the number delivered."""
        with self._publish_lock:
            with self._lock:
                callbacks = list(self._channels.get(channel, {}).items())
            delivered = 0
            for subscription_id, callback in callbacks:
                try:
                    callback(payload)
                    delivered += 1
                except Exception as e:
                    logger.warning(f"Subscriber {subscription_id} on {channel} failed: {e}")
            return delivered

    def close_channel(self, channel: str) -> None:
        """Drop every subscriber of channel; their handles become no-ops."""
        with self._lock:
            self._channels.pop(channel, None)


hub = RealtimeHub()


def get_realtime_hub() -> RealtimeHub:
    return hub
