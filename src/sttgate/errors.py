"""Error taxonomy shared by the state machine, the context and the handlers."""


class ServiceError(Exception):
    """Base class for errors that are turned into structured responses."""


class EngineBusy(ServiceError):
    """The engine is occupied by a model load."""


class EngineNotReady(ServiceError):
    """No model is loaded, or the last load failed."""


class EngineFailure(ServiceError):
    """The engine raised while loading a model or transcribing."""


class InvalidRequest(ServiceError):
    """The request payload or options are unusable."""


class InvalidTransition(RuntimeError):
    """A state transition was attempted from a state that does not allow it."""


class AudioDecodeError(InvalidRequest):
    """The uploaded audio could not be decoded."""
