"""Per-customer mutual exclusion for balance mutations."""

import threading
from contextlib import contextmanager

from rewardman.conf import rewardman_settings
from rewardman.exceptions import ConcurrentUpdateError

_registry_lock = threading.Lock()
_locks: dict[int, threading.Lock] = {}


def _lock_for(customer_id: int) -> threading.Lock:
    with _registry_lock:
        lock = _locks.get(customer_id)
        if lock is None:
            lock = _locks[customer_id] = threading.Lock()
        return lock


@contextmanager
def customer_lock(customer_id: int):
    """
    Hold the customer's lock for the duration of the block.

    Waits at most LOCK_TIMEOUT seconds, then raises ConcurrentUpdateError
    ("CUSTOMER_BUSY").
    """
    lock = _lock_for(customer_id)
    if not lock.acquire(timeout=rewardman_settings.LOCK_TIMEOUT):
        raise ConcurrentUpdateError("CUSTOMER_BUSY", customer_id=customer_id)
    try:
        yield
    finally:
        lock.release()


def discard(customer_id: int) -> None:
    """Forget the lock of a deleted customer."""
    with _registry_lock:
        _locks.pop(customer_id, None)
