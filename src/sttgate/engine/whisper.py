"""Whisper engine using the transformers speech-recognition pipeline.

This module imports torch and should only be imported when the Whisper engine
is selected.
"""

import logging

import numpy as np
import torch

from sttgate.constants import SAMPLE_RATE
from sttgate.engine.protocol import InferenceOptions, Segment, Transcript

logger = logging.getLogger(__name__)

# Whisper attends over 30s windows; longer input is chunked by the pipeline.
CHUNK_LENGTH_S: int = 30


class WhisperEngine:
    """Whisper-family STT engine (openai/whisper-*, distil-whisper, local checkpoints).

    Not safe for concurrent use: the pipeline keeps per-call state on the
    model and processor.
    """

    def __init__(self, device: str = "cpu", dtype: torch.dtype | None = None):
        """Initialize the engine without loading weights.

        Args:
            device: Device to run inference on ("cuda", "cuda:1", "cpu").
            dtype: Model dtype. Defaults to float16 on CUDA and float32 otherwise.
        """
        self._device = device
        if dtype is None:
            dtype = torch.float16 if device.startswith("cuda") else torch.float32
        self._dtype = dtype
        self._pipe = None
        self._model: str | None = None

    def load(self, model: str) -> None:
        """Load model weights, replacing any model already loaded."""
        from transformers import pipeline

        self._unload()
        logger.info("Loading Whisper model %s on %s", model, self._device)
        self._pipe = pipeline(
            "automatic-speech-recognition",
            model=model,
            torch_dtype=self._dtype,
            device=self._device,
            chunk_length_s=CHUNK_LENGTH_S,
        )
        self._model = model

    def transcribe(self, audio: np.ndarray, options: InferenceOptions) -> Transcript:
        """Transcribe one 16kHz float32 array."""
        if self._pipe is None:
            raise RuntimeError("no model loaded")

        duration = len(audio) / SAMPLE_RATE
        with torch.no_grad():
            result = self._pipe(
                {"raw": audio, "sampling_rate": SAMPLE_RATE},
                return_timestamps=True,
                return_language=True,
                generate_kwargs=self._generate_kwargs(options),
            )

        segments = []
        language = None
        for chunk in result.get("chunks", []):
            start, end = chunk["timestamp"]
            segments.append(
                Segment(
                    start=float(start or 0.0),
                    end=float(end if end is not None else duration),
                    text=chunk["text"].strip(),
                )
            )
            language = language or chunk.get("language")

        if language is None:
            language = options.language if options.language != "auto" else "unknown"

        return Transcript(
            text=result["text"].strip(),
            language=language,
            duration=duration,
            segments=segments,
        )

    def _generate_kwargs(self, options: InferenceOptions) -> dict:
        kwargs: dict = {"task": "translate" if options.translate else "transcribe"}
        if options.language and options.language != "auto":
            kwargs["language"] = options.language
        if options.temperature > 0:
            kwargs["do_sample"] = True
            kwargs["temperature"] = options.temperature
        if options.prompt:
            prompt_ids = self._pipe.tokenizer.get_prompt_ids(
                options.prompt, return_tensors="pt"
            )
            kwargs["prompt_ids"] = prompt_ids.to(self._pipe.device)
        return kwargs

    def _unload(self) -> None:
        if self._pipe is None:
            return
        self._pipe = None
        self._model = None
        if torch.cuda.is_available():
            torch.cuda.empty_cache()

    @property
    def device(self) -> str:
        """Return the device the model runs on."""
        return self._device

    @property
    def is_loaded(self) -> bool:
        """Check if a model is loaded."""
        return self._pipe is not None
