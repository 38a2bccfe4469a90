"""Speech-to-text engine implementations behind the Engine protocol."""

from sttgate.engine.protocol import Engine, InferenceOptions, Segment, Transcript


def build_engine(name: str, device: str = "cpu") -> Engine:
    """Instantiate the engine named on the command line.

    The Whisper engine is imported lazily so that torch is only required when
    it is actually used.
    """
    if name == "fake":
        from sttgate.engine.fake import FakeEngine

        return FakeEngine()
    if name == "whisper":
        from sttgate.engine.whisper import WhisperEngine

        return WhisperEngine(device=device)
    raise ValueError(f"unknown engine: {name}")


__all__ = ["Engine", "InferenceOptions", "Segment", "Transcript", "build_engine"]
