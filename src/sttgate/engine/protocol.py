"""Engine protocol defining the interface for STT inference backends.

This is the boundary that isolates model-dependent code from the rest of the
system (state machine, dispatcher, handlers, tests). Implementations are not
required to be safe for concurrent use; callers serialize access.
"""

from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

from sttgate.constants import DEFAULT_LANGUAGE


@dataclass(frozen=True)
class InferenceOptions:
    """Decoding and formatting options for one transcription request."""

    language: str = DEFAULT_LANGUAGE
    translate: bool = False
    temperature: float = 0.0
    prompt: str | None = None
    response_format: str = "json"


@dataclass(frozen=True)
class Segment:
    start: float
    end: float
    text: str


@dataclass
class Transcript:
    """Engine output for one audio input."""

    text: str
    language: str
    duration: float
    segments: list[Segment] = field(default_factory=list)


class Engine(Protocol):
    """Protocol for speech-to-text inference engines.

    This allows swapping between real engines and the fake CPU engine for testing.
    """

    def load(self, model: str) -> None:
        """Load (or replace) the model identified by ``model``.

        Args:
            model: Local path or hub identifier of the model weights.

        Raises:
            Exception: Any failure; the previous model must not be assumed usable.
        """
        ...

    def transcribe(self, audio: np.ndarray, options: InferenceOptions) -> Transcript:
        """Transcribe one audio array.

        Args:
            audio: Float32 numpy array normalized to [-1, 1], 16kHz mono.
            options: Decoding options for this request.

        Returns:
            The transcript with timed segments.
        """
        ...
