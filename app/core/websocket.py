"""Bridges hub callbacks (any thread) onto a WebSocket session's event loop."""
import asyncio
import logging
from typing import Any, Tuple

logger = logging.getLogger(__name__)


class QueueBridge:
    def __init__(self):
        self.loop = asyncio.get_running_loop()
        self.queue: "asyncio.Queue[Tuple[str, Any]]" = asyncio.Queue()

    def push(self, kind: str, payload: Any) -> None:
        """Thread-safe enqueue of (kind, payload)."""
        self.loop.call_soon_threadsafe(self.queue.put_nowait, (kind, payload))

    def event(self, payload: Any) -> None:
        self.push("event", payload)

    def frame(self, payload: Any) -> None:
        self.push("frame", payload)

    async def get(self) -> Tuple[str, Any]:
        return await self.queue.get()


async def cancel_task(task: "asyncio.Task") -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.warning(f"WebSocket pump ended with error: {e}")
