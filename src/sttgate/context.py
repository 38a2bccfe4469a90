"""The single owned object shared by all request handlers.

ServerContext ties the engine to the state machine and the dispatcher. It is
created once per process and passed explicitly to every handler.
"""

import logging

import numpy as np

from sttgate.config import ServerConfig
from sttgate.dispatcher import InferenceDispatcher
from sttgate.engine.protocol import Engine, InferenceOptions, Transcript
from sttgate.errors import EngineFailure
from sttgate.state import EngineState

logger = logging.getLogger(__name__)


class ServerContext:
    """Owns the engine, its lifecycle state and the lock serializing access to it."""

    def __init__(
        self,
        engine: Engine,
        config: ServerConfig | None = None,
        state: EngineState | None = None,
        dispatcher: InferenceDispatcher | None = None,
    ):
        self.engine = engine
        self.config = config or ServerConfig()
        self.state = state or EngineState()
        self.dispatcher = dispatcher or InferenceDispatcher()

    @property
    def credential(self) -> str:
        return self.config.api_key

    def load_model(self, model: str) -> None:
        """Load ``model`` into the engine.

        The state moves to LOADING before waiting for the engine, so inference
        requests arriving meanwhile are rejected as busy instead of queueing
        behind the load.

        Raises:
            EngineBusy: Another load is in progress. The in-flight load is
                left untouched.
            EngineFailure: The engine failed; the state is now ERROR.
        """
        self.state.start_load()

        error: str | None = "load interrupted"
        try:
            with self.dispatcher.exclusive():
                self.engine.load(model)
            error = None
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.error("Failed to load model %s: %s", model, error)
            raise EngineFailure(f"failed to load model '{model}': {e}") from e
        finally:
            if error is None:
                self.state.load_succeeded(model)
            else:
                self.state.load_failed(error)

    def transcribe(self, audio: np.ndarray, options: InferenceOptions) -> Transcript:
        """Run one inference with exclusive engine access.

        Raises:
            EngineBusy: A load started while this request waited for the engine.
            EngineNotReady: No usable model.
            EngineFailure: The engine raised; the state is unchanged.
        """
        with self.dispatcher.exclusive():
            # Re-check under the lock: a load may have started while we waited.
            self.state.require_ready()
            try:
                return self.engine.transcribe(audio, options)
            except Exception as e:
                logger.exception("Inference failed")
                raise EngineFailure(f"inference failed: {e}") from e
