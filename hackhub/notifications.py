"""
hackhub/notifications.py
Best-effort participant notifications.

Delivery is an external concern: when NOTIFICATION_WEBHOOK_URL is set the
payload is POSTed there (the mail service behind it sends the email),
otherwise it is only logged. Dispatch never blocks the request and never
raises into the caller.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

import httpx

from hackhub.config import settings

logger = logging.getLogger(__name__)

# Keep strong references so pending tasks are not garbage collected
_pending: Set[asyncio.Task] = set()


class LogNotifier:
    """Fallback notifier that only records what would have been sent."""

    async def send(self, kind: str, payload: Dict[str, Any]) -> None:
        logger.info(f"[NOTIFY] {kind} -> user={payload.get('user_id')} (no webhook configured)")


class WebhookNotifier:
    """POSTs notification payloads to an HTTP endpoint."""

    def __init__(self, url: str, timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def send(self, kind: str, payload: Dict[str, Any]) -> None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.url, json={"type": kind, "data": payload})
            response.raise_for_status()


def default_notifier():
    if settings.NOTIFICATION_WEBHOOK_URL:
        return WebhookNotifier(settings.NOTIFICATION_WEBHOOK_URL, settings.NOTIFICATION_TIMEOUT_SECONDS)
    return LogNotifier()


async def _run_bounded(send: Callable[[], Awaitable[None]], kind: str, timeout: float) -> None:
    try:
        await asyncio.wait_for(send(), timeout=timeout)
        logger.info(f"[NOTIFY SENT] {kind}")
    except asyncio.TimeoutError:
        logger.warning(f"[NOTIFY FAILED] {kind}: timed out after {timeout}s")
    except Exception as e:
        logger.warning(f"[NOTIFY FAILED] {kind}: {type(e).__name__}: {e}")


def dispatch(notifier, kind: str, payload: Dict[str, Any], timeout: Optional[float] = None) -> asyncio.Task:
    """
    Schedule a notification in the background and return immediately.

    Failures and timeouts are logged and swallowed; the returned task never
    raises.
    """
    timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT_SECONDS
    task = asyncio.create_task(_run_bounded(lambda: notifier.send(kind, payload), kind, timeout))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def drain(timeout: float = 5.0) -> None:
    """Wait for in-flight notifications (used at shutdown and in tests)."""
    if _pending:
        await asyncio.wait(list(_pending), timeout=timeout)
