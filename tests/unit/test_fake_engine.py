"""Unit tests for the FakeEngine implementation."""

import threading
import time

import numpy as np
import pytest

from sttgate.engine import build_engine
from sttgate.engine.fake import FakeEngine
from sttgate.engine.protocol import InferenceOptions


@pytest.fixture
def loaded():
    engine = FakeEngine()
    engine.load("fake-model")
    return engine


class TestFakeEngine:
    def test_transcribe_single(self, loaded):
        """Single audio transcription."""
        audio = np.zeros(16000, dtype=np.float32)  # 1 second of silence
        result = loaded.transcribe(audio, InferenceOptions())

        assert "[fake:" in result.text
        assert "1.00s" in result.text
        assert result.duration == pytest.approx(1.0)
        assert len(result.segments) == 1

    def test_translate_option(self, loaded):
        result = loaded.transcribe(np.zeros(100), InferenceOptions(translate=True))
        assert "translate" in result.text

    def test_requires_model(self):
        with pytest.raises(RuntimeError):
            FakeEngine().transcribe(np.zeros(100), InferenceOptions())

    def test_fail_load_clears_model(self, loaded):
        loaded.fail_load = True
        with pytest.raises(RuntimeError):
            loaded.load("other")
        assert loaded.model is None

    def test_counts(self, loaded):
        assert loaded.load_count == 1
        assert loaded.call_count == 0

        loaded.transcribe(np.zeros(100), InferenceOptions())
        loaded.transcribe(np.zeros(100), InferenceOptions())
        assert loaded.call_count == 2

    def test_latency_simulation(self):
        """Latency simulation should delay execution."""
        engine = FakeEngine(latency_ms=50)
        engine.load("fake-model")
        start = time.time()
        engine.transcribe(np.zeros(100), InferenceOptions())
        elapsed = time.time() - start

        assert elapsed >= 0.05

    def test_deterministic_output(self, loaded):
        """Same input should produce same output."""
        audio = np.array([0.1, 0.2, 0.3], dtype=np.float32)

        result1 = loaded.transcribe(audio, InferenceOptions()).text
        result2 = loaded.transcribe(audio, InferenceOptions()).text

        assert result1 == result2

    def test_max_active_detects_overlap(self, loaded):
        """Unserialized callers are visible in max_active."""
        gate = threading.Event()
        loaded.gate = gate
        threads = [
            threading.Thread(
                target=loaded.transcribe, args=(np.zeros(100), InferenceOptions())
            )
            for _ in range(2)
        ]
        for t in threads:
            t.start()
        deadline = time.time() + 2.0
        while loaded.max_active < 2 and time.time() < deadline:
            time.sleep(0.005)
        gate.set()
        for t in threads:
            t.join()

        assert loaded.max_active == 2


class TestBuildEngine:
    def test_fake(self):
        assert isinstance(build_engine("fake"), FakeEngine)

    def test_unknown(self):
        with pytest.raises(ValueError):
            build_engine("nope")
