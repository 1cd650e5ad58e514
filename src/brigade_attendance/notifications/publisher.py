"""Outbound notification port.

Attendance writes publish a small event toward each affected student's live
channel after the write has committed. Delivery is best effort: a failure here
never reaches the caller of the write.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Optional, Protocol

import redis

logger = logging.getLogger(__name__)


def user_channel(user_id: int) -> str:
    return f"user-{int(user_id)}"


class AttendanceNotifier(Protocol):
    def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotifier(AttendanceNotifier):
    """Default backend: records the event in the application log only."""

    def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        logger.info("notify channel=%s event=%s message=%s", channel, event, payload.get("message"))


class RedisNotifier(AttendanceNotifier):
    """Publish events on Redis pub/sub; a push gateway relays them to browsers."""

    def __init__(self, url: str, *, client: Optional[redis.Redis] = None):
        self._r = client or redis.Redis.from_url(url, decode_responses=True, socket_timeout=2)
        logger.info("RedisNotifier initialized: url=%s", url)

    def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        self._r.publish(channel, json.dumps({"event": event, "data": payload}, default=str))


def _log_failure(channel: str, future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("Notification to %s failed", channel, exc_info=exc)


class BackgroundNotifier(AttendanceNotifier):
    """Run another notifier on a small worker pool; ``publish`` only enqueues."""

    def __init__(self, inner: AttendanceNotifier, *, max_workers: int = 2):
        self._inner = inner
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        future = self._executor.submit(self._inner.publish, channel, event, payload)
        future.add_done_callback(partial(_log_failure, channel))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def notify_safely(notifier: AttendanceNotifier, channel: str, event: str, payload: dict[str, Any]) -> bool:
    """Publish and report success; every error is logged and swallowed."""

    try:
        notifier.publish(channel, event, payload)
        return True
    except Exception:
        logger.warning("Notification to %s failed", channel, exc_info=True)
        return False


def build_notifier(backend: str, *, redis_url: str = "") -> AttendanceNotifier:
    backend = (backend or "log").strip().lower()
    if backend == "redis":
        return BackgroundNotifier(RedisNotifier(redis_url))
    if backend != "log":
        logger.warning("Unknown notifier backend %r, falling back to log", backend)
    return LoggingNotifier()
