"""sttgate: authorized, serialized HTTP access to a speech-to-text engine."""

from sttgate.auth import AuthDecision, authorize
from sttgate.config import ServerConfig
from sttgate.constants import API_KEY_ENV, SAMPLE_RATE
from sttgate.context import ServerContext
from sttgate.dispatcher import InferenceDispatcher
from sttgate.state import EngineState, EngineStatus

__all__ = [
    "API_KEY_ENV",
    "SAMPLE_RATE",
    "AuthDecision",
    "authorize",
    "ServerConfig",
    "ServerContext",
    "InferenceDispatcher",
    "EngineState",
    "EngineStatus",
]
