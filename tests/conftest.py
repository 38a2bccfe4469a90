"""Shared fixtures for sttgate tests."""

import numpy as np
import pytest

from sttgate.audio import encode_audio
from sttgate.config import ServerConfig
from sttgate.context import ServerContext
from sttgate.engine.fake import FakeEngine


def make_wav(seconds: float = 1.0, sample_rate: int = 16000, freq: float = 440.0) -> bytes:
    t = np.arange(int(sample_rate * seconds), dtype=np.float32) / sample_rate
    tone = 0.3 * np.sin(2 * np.pi * freq * t).astype(np.float32)
    return encode_audio(tone, sample_rate)


@pytest.fixture
def wav_bytes() -> bytes:
    return make_wav(1.0)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def context(engine) -> ServerContext:
    return ServerContext(engine, ServerConfig(api_key="secret1"))


@pytest.fixture
def ready_context(context) -> ServerContext:
    context.load_model("fake-model")
    return context
