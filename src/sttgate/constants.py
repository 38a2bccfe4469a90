"""Core constants for the sttgate service.

Whisper-family models consume 16kHz mono audio; uploads are resampled to
this rate before they reach the engine.
"""

# Audio format requirements
SAMPLE_RATE: int = 16000  # Hz - required by Whisper feature extractor

# Server defaults
DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8080
DEFAULT_LANGUAGE: str = "en"

# Credential fallback when --api-key is not given
API_KEY_ENV: str = "STT_API_KEY"

# Authorization header scheme, including the separating space
BEARER_PREFIX: str = "Bearer "

RESPONSE_FORMATS: tuple[str, ...] = ("json", "text", "verbose_json", "srt", "vtt")
