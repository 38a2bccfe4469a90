"""Engine lifecycle state machine.

    IDLE ----start_load----> LOADING ----load_success----> READY
    ERROR ---start_load----> LOADING ----load_failure----> ERROR
    READY ---start_load----> LOADING

Only one load can be in flight: ``start_load`` while LOADING raises
EngineBusy. Every read and write happens under a private lock so callers
never observe a half-applied transition. The lock is held only for the
duration of the field updates, never while the engine itself runs.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from sttgate.errors import EngineBusy, EngineNotReady, InvalidTransition

logger = logging.getLogger(__name__)


class EngineStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class StateSnapshot:
    """Consistent view of the engine state at one instant."""

    status: EngineStatus
    detail: str | None = None
    model: str | None = None


class EngineState:
    """Thread-safe holder for the engine lifecycle."""

    def __init__(self):
        self._guard = threading.Lock()
        self._status = EngineStatus.IDLE
        self._detail: str | None = None
        self._model: str | None = None

    def snapshot(self) -> StateSnapshot:
        with self._guard:
            return StateSnapshot(self._status, self._detail, self._model)

    @property
    def status(self) -> EngineStatus:
        with self._guard:
            return self._status

    def start_load(self) -> None:
        """Enter LOADING from IDLE, READY or ERROR.

        Raises:
            EngineBusy: A load is already in progress.
        """
        with self._guard:
            if self._status is EngineStatus.LOADING:
                raise EngineBusy("a model load is already in progress")
            previous = self._status
            self._status = EngineStatus.LOADING
            self._detail = None
        logger.info("Engine state %s -> loading", previous.value)

    def load_succeeded(self, model: str) -> None:
        with self._guard:
            self._require_loading("load_success")
            self._status = EngineStatus.READY
            self._detail = None
            self._model = model
        logger.info("Engine state loading -> ready (model=%s)", model)

    def load_failed(self, detail: str) -> None:
        with self._guard:
            self._require_loading("load_failure")
            self._status = EngineStatus.ERROR
            self._detail = detail
            self._model = None
        logger.warning("Engine state loading -> error: %s", detail)

    def require_ready(self) -> None:
        """Raise unless the engine can serve inference right now.

        Raises:
            EngineBusy: A load is in progress.
            EngineNotReady: No model is loaded or the last load failed.
        """
        with self._guard:
            status, detail = self._status, self._detail

        if status is EngineStatus.READY:
            return
        if status is EngineStatus.LOADING:
            raise EngineBusy("engine is loading a model")
        if status is EngineStatus.ERROR:
            raise EngineNotReady(f"last model load failed: {detail}; load a model first")
        raise EngineNotReady("no model loaded; load a model first")

    def _require_loading(self, transition: str) -> None:
        # Caller holds self._guard.
        if self._status is not EngineStatus.LOADING:
            raise InvalidTransition(
                f"{transition} is only valid from loading, state is {self._status.value}"
            )
