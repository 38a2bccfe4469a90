"""Serialized access to the engine.

The engine mutates internal buffers during load and inference and must never
be entered by two threads at once. All engine calls go through
``InferenceDispatcher.exclusive()``.
"""

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class InferenceDispatcher:
    """Single exclusive lock guarding every engine-touching operation.

    Waiters block without a timeout; ordering among them is whatever the
    underlying ``threading.Lock`` provides. A caller that never releases
    stalls every other engine operation.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def acquire(self) -> None:
        """Block until exclusive engine access is granted."""
        start = time.perf_counter()
        self._lock.acquire()
        waited_ms = (time.perf_counter() - start) * 1000
        if waited_ms >= 1.0:
            logger.debug("Engine lock acquired after %.1fms wait", waited_ms)

    def release(self) -> None:
        """Release exclusive engine access.

        Raises:
            RuntimeError: The dispatcher is not held.
        """
        self._lock.release()

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the engine for the duration of the block, releasing on any exit."""
        self.acquire()
        try:
            yield
        finally:
            self.release()

    @property
    def busy(self) -> bool:
        """Whether an operation currently holds the engine. Non-blocking."""
        return self._lock.locked()
