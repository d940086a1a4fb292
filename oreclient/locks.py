"""
Locking for lifecycle operations

PluginLocks hands out one re-entrant lock per plugin id so that operations
on the same plugin run one at a time while different plugins proceed in
parallel. ApplyGate lets any number of operations run together but gives the
update applier exclusive access.
"""

import threading
from contextlib import contextmanager
from typing import Dict


class PluginLocks:
    """Registry of per-plugin re-entrant locks"""

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def get(self, plugin_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(plugin_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[plugin_id] = lock
            return lock

    @contextmanager
    def hold(self, plugin_id: str):
        lock = self.get(plugin_id)
        with lock:
            yield


class ApplyGate:
    """Shared/exclusive gate between lifecycle operations and the applier

    Shared holders never wait on each other, so an operation that nests
    another (installing dependencies) cannot deadlock on the gate.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._shared = 0
        self._exclusive = False

    @contextmanager
    def shared(self):
        with self._condition:
            while self._exclusive:
                self._condition.wait()
            self._shared += 1
        try:
            yield
        finally:
            with self._condition:
                self._shared -= 1
                if self._shared == 0:
                    self._condition.notify_all()

    @contextmanager
    def exclusive(self):
        with self._condition:
            while self._exclusive or self._shared:
                self._condition.wait()
            self._exclusive = True
        try:
            yield
        finally:
            with self._condition:
                self._exclusive = False
                self._condition.notify_all()
