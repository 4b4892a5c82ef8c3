"""
Per-event serialization for capacity decisions and rank recalculation.

Within one process an asyncio.Lock per event id orders the critical
sections. Across processes the services additionally take a row lock on the
event (SELECT ... FOR UPDATE) where the dialect supports it.
"""
import asyncio
import weakref

_event_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def event_lock(event_id: str) -> asyncio.Lock:
    """Return the lock for this event, creating it on first use."""
    key = str(event_id)
    lock = _event_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _event_locks[key] = lock
    return lock
