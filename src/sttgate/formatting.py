"""Render transcripts in the response formats clients can request."""

from sttgate.engine.protocol import Transcript


def _timestamp(seconds: float, separator: str) -> str:
    millis = int(round(max(seconds, 0.0) * 1000))
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}{separator}{millis:03d}"


def to_srt(transcript: Transcript) -> str:
    blocks = []
    for index, segment in enumerate(transcript.segments, start=1):
        blocks.append(
            f"{index}\n"
            f"{_timestamp(segment.start, ',')} --> {_timestamp(segment.end, ',')}\n"
            f"{segment.text}\n"
        )
    return "\n".join(blocks)


def to_vtt(transcript: Transcript) -> str:
    lines = ["WEBVTT", ""]
    for segment in transcript.segments:
        lines.append(f"{_timestamp(segment.start, '.')} --> {_timestamp(segment.end, '.')}")
        lines.append(segment.text)
        lines.append("")
    return "\n".join(lines)


def to_verbose_json(transcript: Transcript, translate: bool = False) -> dict:
    return {
        "task": "translate" if translate else "transcribe",
        "language": transcript.language,
        "duration": transcript.duration,
        "text": transcript.text,
        "segments": [
            {"id": i, "start": s.start, "end": s.end, "text": s.text}
            for i, s in enumerate(transcript.segments)
        ],
    }


def render(transcript: Transcript, response_format: str, translate: bool = False) -> tuple[object, str]:
    """Render a transcript.

    Returns:
        (body, media_type): dict bodies are sent as JSON, strings as text.
    """
    if response_format == "json":
        return {"text": transcript.text}, "application/json"
    if response_format == "verbose_json":
        return to_verbose_json(transcript, translate), "application/json"
    if response_format == "text":
        return transcript.text + "\n", "text/plain"
    if response_format == "srt":
        return to_srt(transcript), "application/x-subrip"
    if response_format == "vtt":
        return to_vtt(transcript), "text/vtt"
    raise ValueError(f"unknown response format: {response_format}")
