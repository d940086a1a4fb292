"""
Offloaded units of work

Repository operations block on network and disk I/O, so they run on a
worker pool instead of the host's main loop. Their outcome is reported to a
messenger callback because whoever asked may be gone by the time the
request completes.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from .exceptions import OreError

logger = logging.getLogger('Ore.tasks')


class TaskRunner:
    """Runs named client operations on a thread pool"""

    def __init__(self, max_workers: int = 4):
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ore")
        self._closed = False

    def submit(self, name: str, fn: Callable[[], Any],
               messenger: Optional[Callable[[str], None]] = None,
               on_success: Optional[Callable[[Any], None]] = None) -> Future:
        """Schedule ``fn``; OreErrors go to the messenger, anything else is logged"""
        if self._closed:
            raise RuntimeError("task runner has been shut down")

        def run():
            logger.debug(f"Task '{name}' started")
            try:
                result = fn()
            except OreError as e:
                logger.info(f"Task '{name}' failed: {e}")
                if messenger is not None:
                    messenger(str(e))
                raise
            except Exception as e:
                logger.exception(f"Task '{name}' failed unexpectedly")
                if messenger is not None:
                    messenger(f"An unexpected error occurred: {e}")
                raise
            if on_success is not None:
                on_success(result)
            logger.debug(f"Task '{name}' finished")
            return result

        return self.executor.submit(run)

    def shutdown(self, wait: bool = True):
        self._closed = True
        self.executor.shutdown(wait=wait)
