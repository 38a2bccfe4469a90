"""Startup configuration.

Built once from command-line flags and the environment, then frozen. The API
key given with ``--api-key`` wins over the ``STT_API_KEY`` environment
variable.
"""

import argparse
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from sttgate.constants import API_KEY_ENV, DEFAULT_HOST, DEFAULT_LANGUAGE, DEFAULT_PORT


@dataclass(frozen=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    request_path: str = ""
    model_path: str | None = None
    api_key: str = ""
    health_requires_auth: bool = False
    language: str = DEFAULT_LANGUAGE
    engine: str = "whisper"
    device: str = "cpu"
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks.
        return (
            f"ServerConfig(host={self.host!r}, port={self.port}, "
            f"request_path={self.request_path!r}, model_path={self.model_path!r}, "
            f"api_key={'<set>' if self.api_key else '<unset>'}, "
            f"health_requires_auth={self.health_requires_auth}, "
            f"language={self.language!r}, engine={self.engine!r}, "
            f"device={self.device!r}, log_level={self.log_level!r})"
        )

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_args(
        cls,
        argv: Sequence[str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "ServerConfig":
        """Parse flags, applying the environment fallback for the API key."""
        environ = os.environ if environ is None else environ
        args = build_parser().parse_args(argv)

        api_key = args.api_key if args.api_key is not None else environ.get(API_KEY_ENV, "")

        return cls(
            host=args.host,
            port=args.port,
            request_path=normalize_request_path(args.request_path),
            model_path=args.model,
            api_key=api_key,
            health_requires_auth=args.health_auth,
            language=args.language,
            engine=args.engine,
            device=args.device,
            log_level=args.log_level.upper(),
        )


def normalize_request_path(path: str) -> str:
    """Return ``path`` with a leading slash and no trailing slash ("" for root)."""
    path = path.strip().rstrip("/")
    if path and not path.startswith("/"):
        path = "/" + path
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sttgate",
        description="HTTP front-end for a speech-to-text engine",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="Address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on")
    parser.add_argument(
        "--request-path",
        default="",
        help="Prefix for all routes, e.g. /stt",
    )
    parser.add_argument(
        "-m", "--model",
        default=None,
        help="Model to load at startup (local path or hub id); also the /load default",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help=f"Bearer token required on protected endpoints (default: ${API_KEY_ENV})",
    )
    parser.add_argument(
        "--health-auth",
        action="store_true",
        help="Require the API key on the health endpoint too",
    )
    parser.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        help="Default spoken language ('auto' to detect)",
    )
    parser.add_argument(
        "--engine",
        choices=["whisper", "fake"],
        default="whisper",
        help="Inference backend",
    )
    parser.add_argument("--device", default="cpu", help="Torch device for the whisper engine")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser
