"""
Per-item locks for bid admission

Two backends share the same ``lock(item_id)`` context manager:

- LocalItemLock: one threading.Lock per item, correct inside one process
- RedisItemLock: SET NX PX lock with retry, correct across processes

Different items never share a lock.
"""
import logging
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Dict, Tuple

import redis

from marketplace.core.config import get_settings
from marketplace.core.errors import ItemBusyError, StorageFailureError

logger = logging.getLogger(__name__)


class ItemLock:
    """Interface for per-item critical sections"""

    backend = "abstract"

    def lock(self, item_id: int):
        """
        Hold the item's lock for the duration of the block

        Usage:
            with item_lock.lock(item_id) as retry_count:
                admit_bid()

        Raises:
            ItemBusyError: If the lock can't be acquired in time
        """
        raise NotImplementedError


class LocalItemLock(ItemLock):
    """
    In-process per-item mutexes

    An item's entry lives only while someone holds or waits on it, so the
    registry stays as small as the number of items currently being bid on.
    """

    backend = "memory"

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        # item_id -> [lock, holders + waiters]
        self._locks: Dict[int, list] = {}
        self._registry_lock = threading.Lock()

    def _checkout(self, item_id: int) -> threading.Lock:
        with self._registry_lock:
            entry = self._locks.get(item_id)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[item_id] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, item_id: int):
        with self._registry_lock:
            entry = self._locks[item_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[item_id]

    @contextmanager
    def lock(self, item_id: int):
        item_lock = self._checkout(item_id)
        try:
            if not item_lock.acquire(timeout=self.timeout):
                raise ItemBusyError(f"Item {item_id} is busy, try again")
            try:
                yield 0
            finally:
                item_lock.release()
        finally:
            self._checkin(item_id)


class RedisItemLock(ItemLock):
    """Distributed lock with retry tracking"""

    backend = "redis"

    # Lua script for atomic unlock
    UNLOCK_SCRIPT = """
    if redis.call("GET", KEYS[1]) == ARGV[1] then
        return redis.call("DEL", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, redis_client: redis.Redis, lock_expire_ms: int = None,
                 retry_delay: float = None, max_retries: int = None):
        settings = get_settings()
        self.redis = redis_client
        self.lock_expire_ms = lock_expire_ms or settings.LOCK_EXPIRE_MS
        self.retry_delay = retry_delay if retry_delay is not None else settings.LOCK_RETRY_DELAY
        self.max_retries = max_retries or settings.LOCK_MAX_RETRIES

    @staticmethod
    def key_for(item_id: int) -> str:
        return f"item:lock:{item_id}"

    def acquire(self, item_id: int) -> Tuple[str, str, int]:
        """
        Try to acquire lock with retry

        Returns: (lock_key, request_id, retry_count)
        Raises: ItemBusyError if can't acquire, StorageFailureError if Redis is down
        """
        lock_key = self.key_for(item_id)
        request_id = str(uuid.uuid4())

        for attempt in range(self.max_retries):
            try:
                acquired = self.redis.set(
                    lock_key,
                    request_id,
                    nx=True,
                    px=self.lock_expire_ms
                )
            except redis.RedisError as e:
                logger.error(f"Lock backend unavailable: {e}", extra={'item_id': item_id})
                raise StorageFailureError("Lock backend unavailable") from e

            if acquired:
                return lock_key, request_id, attempt

            # Backoff before retry
            if attempt < self.max_retries - 1:
                time.sleep(self.retry_delay)

        logger.warning(f"Could not acquire lock for item {item_id}", extra={'item_id': item_id})
        raise ItemBusyError(f"Item {item_id} is busy, try again")

    def release(self, lock_key: str, request_id: str):
        """Release lock only if we own it"""
        try:
            self.redis.eval(self.UNLOCK_SCRIPT, 1, lock_key, request_id)
        except redis.RedisError as e:
            # The key expires on its own after lock_expire_ms
            logger.warning(f"Error releasing lock {lock_key}: {e}")

    @contextmanager
    def lock(self, item_id: int):
        lock_key, request_id, retry_count = self.acquire(item_id)

        try:
            yield retry_count
        finally:
            self.release(lock_key, request_id)


_item_lock = None


def get_item_lock() -> ItemLock:
    """Get the configured item lock (singleton)"""
    global _item_lock

    if _item_lock is None:
        settings = get_settings()
        if settings.LOCK_BACKEND == "redis":
            from marketplace.infrastructure.redis_client import get_redis_client
            _item_lock = RedisItemLock(get_redis_client())
        else:
            _item_lock = LocalItemLock()

    return _item_lock
