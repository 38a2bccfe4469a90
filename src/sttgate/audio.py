"""Audio decoding utilities.

Uploads may be any container libsndfile reads (WAV incl. IEEE float, FLAC,
OGG/Vorbis, ...). They are converted to mono float32 arrays normalized to
[-1, 1] at SAMPLE_RATE before being handed to the engine.
"""

import io

import numpy as np
import soundfile as sf

from sttgate.constants import SAMPLE_RATE
from sttgate.errors import AudioDecodeError


def pcm16_to_float32(data: bytes) -> np.ndarray:
    """Convert PCM16 bytes to float32 array normalized to [-1, 1].

    Args:
        data: Raw PCM16 little-endian audio bytes.

    Returns:
        Float32 numpy array with values in [-1, 1].
    """
    audio = np.frombuffer(data, dtype="<i2").astype(np.float32)
    audio /= 32768.0
    return audio


def float32_to_pcm16(audio: np.ndarray) -> bytes:
    """Convert float32 array [-1, 1] to PCM16 bytes.

    Args:
        audio: Float32 numpy array with values in [-1, 1].

    Returns:
        Raw PCM16 little-endian audio bytes.
    """
    clipped = np.clip(audio, -1.0, 1.0)
    pcm = (clipped * 32767.0).astype("<i2")
    return pcm.tobytes()


def resample(audio: np.ndarray, orig_rate: int, target_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Linearly resample a mono float32 array."""
    if orig_rate == target_rate or len(audio) == 0:
        return audio.astype(np.float32, copy=False)

    target_len = int(round(len(audio) * target_rate / orig_rate))
    if target_len == 0:
        return np.zeros(0, dtype=np.float32)
    src_positions = np.arange(len(audio), dtype=np.float64) / orig_rate
    dst_positions = np.arange(target_len, dtype=np.float64) / target_rate
    return np.interp(dst_positions, src_positions, audio).astype(np.float32)


def decode_audio(data: bytes, target_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Decode an uploaded audio file into mono float32 audio at ``target_rate``.

    Multi-channel audio is downmixed by averaging channels.

    Raises:
        AudioDecodeError: The payload is empty, not a format libsndfile
            understands, or holds no samples.
    """
    if not data:
        raise AudioDecodeError("empty audio payload")

    try:
        frames, rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
    except sf.SoundFileError as e:
        raise AudioDecodeError(f"failed to read audio data: {e}") from e

    if frames.shape[0] == 0:
        raise AudioDecodeError("audio file contains no samples")

    audio = frames.mean(axis=1) if frames.shape[1] > 1 else frames[:, 0]
    return resample(audio, rate, target_rate)


def encode_audio(
    audio: np.ndarray,
    sample_rate: int = SAMPLE_RATE,
    subtype: str = "PCM_16",
    container: str = "WAV",
) -> bytes:
    """Encode a float32 array (frames x channels, or mono) as an audio file."""
    buffer = io.BytesIO()
    sf.write(buffer, audio, sample_rate, subtype=subtype, format=container)
    return buffer.getvalue()


def duration_seconds(audio: np.ndarray, sample_rate: int = SAMPLE_RATE) -> float:
    """Duration of a mono array in seconds."""
    return len(audio) / sample_rate
