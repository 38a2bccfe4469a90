"""Fake engine for CPU-based testing.

Returns deterministic output based on audio characteristics, allowing
reliable unit tests without model weights. It also records how many callers
are inside it at once, which lets tests verify that access is serialized.
"""

import hashlib
import threading
import time

import numpy as np

from sttgate.constants import SAMPLE_RATE
from sttgate.engine.protocol import InferenceOptions, Segment, Transcript


class FakeEngine:
    """Deterministic CPU engine for testing.

    Generates predictable transcriptions based on audio length and content hash.
    """

    def __init__(
        self,
        latency_ms: float = 0.0,
        load_latency_ms: float = 0.0,
        fail_load: bool = False,
        fail_transcribe: bool = False,
        gate: threading.Event | None = None,
    ):
        """Initialize the fake engine.

        Args:
            latency_ms: Simulated inference latency in milliseconds.
            load_latency_ms: Simulated model load latency in milliseconds.
            fail_load: Make every load raise.
            fail_transcribe: Make every transcription raise.
            gate: When given, load and transcribe wait for it to be set before
                returning, so tests can hold the engine open.
        """
        self._latency_ms = latency_ms
        self._load_latency_ms = load_latency_ms
        self.fail_load = fail_load
        self.fail_transcribe = fail_transcribe
        self.gate = gate
        self.entered = threading.Event()

        self._counters = threading.Lock()
        self._active = 0
        self._max_active = 0
        self._call_count = 0
        self._load_count = 0
        self._model: str | None = None

    def load(self, model: str) -> None:
        self._enter()
        try:
            self._load_count += 1
            self._wait(self._load_latency_ms)
            if self.fail_load:
                self._model = None
                raise RuntimeError(f"failed to load model '{model}'")
            self._model = model
        finally:
            self._exit()

    def transcribe(self, audio: np.ndarray, options: InferenceOptions) -> Transcript:
        """Generate a deterministic transcription based on audio properties."""
        self._enter()
        try:
            self._call_count += 1
            self._wait(self._latency_ms)
            if self.fail_transcribe:
                raise RuntimeError("fake engine failure")
            if self._model is None:
                raise RuntimeError("no model loaded")

            duration_s = len(audio) / SAMPLE_RATE
            audio_hash = self._hash_audio(audio)
            task = "translate" if options.translate else "transcribe"
            text = f"[fake:{audio_hash[:8]}|{duration_s:.2f}s|{task}]"
            language = "en" if options.language == "auto" else options.language
            return Transcript(
                text=text,
                language=language,
                duration=duration_s,
                segments=[Segment(0.0, duration_s, text)],
            )
        finally:
            self._exit()

    @property
    def call_count(self) -> int:
        """Number of transcribe calls made."""
        return self._call_count

    @property
    def load_count(self) -> int:
        """Number of load calls made."""
        return self._load_count

    @property
    def max_active(self) -> int:
        """Highest number of callers seen inside the engine at the same time."""
        with self._counters:
            return self._max_active

    @property
    def model(self) -> str | None:
        return self._model

    def _enter(self) -> None:
        with self._counters:
            self._active += 1
            self._max_active = max(self._max_active, self._active)
        self.entered.set()

    def _exit(self) -> None:
        with self._counters:
            self._active -= 1

    def _wait(self, latency_ms: float) -> None:
        if latency_ms > 0:
            time.sleep(latency_ms / 1000.0)
        if self.gate is not None:
            self.gate.wait()

    @staticmethod
    def _hash_audio(audio: np.ndarray) -> str:
        """Generate a short hash of audio content for deterministic output."""
        # Use first 100 samples (or all if shorter) for hash
        samples = audio[: min(100, len(audio))]
        data = samples.tobytes()
        return hashlib.sha256(data).hexdigest()
