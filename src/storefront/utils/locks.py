"""Per-key in-process locks.

A lock lives only while some caller holds or waits on it, so the registry
never grows past the number of keys in use at once.
"""

import threading
import weakref
from contextlib import contextmanager


class KeyedLocks:
    def __init__(self):
        self._locks = weakref.WeakValueDictionary()
        self._registry_lock = threading.Lock()

    def __len__(self):
        return len(self._locks)

    def lock_for(self, key) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, keys):
        """Acquire the locks for ``keys`` in sorted order, release in reverse."""
        ordered = sorted({str(key) for key in keys})
        acquired = []
        try:
            for key in ordered:
                lock = self.lock_for(key)
                lock.acquire()
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()
