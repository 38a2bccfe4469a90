"""Transport-independent request handlers.

Each handler is a plain function ``(request, context) -> Response`` that
starts with the authorization guard clause. Every error is converted into a
structured response here; nothing propagates to the HTTP layer.
"""

import logging
from dataclasses import dataclass, field

from sttgate.audio import decode_audio
from sttgate.auth import is_allowed
from sttgate.constants import RESPONSE_FORMATS
from sttgate.context import ServerContext
from sttgate.engine.protocol import InferenceOptions
from sttgate.errors import (
    EngineBusy,
    EngineFailure,
    EngineNotReady,
    InvalidRequest,
    ServiceError,
)
from sttgate.formatting import render

logger = logging.getLogger(__name__)


@dataclass
class Response:
    status_code: int
    body: object
    media_type: str = "application/json"


@dataclass
class HealthRequest:
    authorization: str | None = None


@dataclass
class LoadRequest:
    model: str | None = None
    authorization: str | None = None


@dataclass
class InferenceRequest:
    audio: bytes | None = None
    options: InferenceOptions = field(default_factory=InferenceOptions)
    authorization: str | None = None


def error_response(status_code: int, message: str) -> Response:
    return Response(status_code, {"error": message})


def unauthorized(endpoint: str) -> Response:
    logger.warning("Rejected unauthorized %s request", endpoint)
    return error_response(401, "Unauthorized")


def health(request: HealthRequest, ctx: ServerContext) -> Response:
    if ctx.config.health_requires_auth and not is_allowed(request.authorization, ctx.credential):
        return unauthorized("health")

    snapshot = ctx.state.snapshot()
    body: dict = {"status": "ok", "engine": snapshot.status.value}
    if snapshot.model:
        body["model"] = snapshot.model
    return Response(200, body)


def load(request: LoadRequest, ctx: ServerContext) -> Response:
    if not is_allowed(request.authorization, ctx.credential):
        return unauthorized("load")

    model = request.model or ctx.config.model_path
    if not model:
        return error_response(400, "no model specified")

    try:
        ctx.load_model(model)
    except EngineBusy as e:
        return error_response(409, str(e))
    except EngineFailure as e:
        return error_response(500, str(e))
    except Exception:
        logger.exception("Unexpected error while loading %s", model)
        return error_response(500, "internal error")

    return Response(200, {"status": "ok", "model": model})


def validate_options(options: InferenceOptions) -> None:
    if options.response_format not in RESPONSE_FORMATS:
        raise InvalidRequest(
            f"unsupported response_format '{options.response_format}', "
            f"expected one of: {', '.join(RESPONSE_FORMATS)}"
        )
    if options.temperature < 0:
        raise InvalidRequest("temperature must be >= 0")
    if not options.language:
        raise InvalidRequest("language must not be empty")


def inference(request: InferenceRequest, ctx: ServerContext) -> Response:
    if not is_allowed(request.authorization, ctx.credential):
        return unauthorized("inference")

    try:
        # Cheap rejection before decoding; transcribe() checks again under the lock.
        ctx.state.require_ready()

        if request.audio is None:
            raise InvalidRequest("no audio file provided")
        validate_options(request.options)
        audio = decode_audio(request.audio)

        transcript = ctx.transcribe(audio, request.options)
        body, media_type = render(
            transcript, request.options.response_format, request.options.translate
        )
    except (EngineBusy, EngineNotReady) as e:
        return error_response(503, str(e))
    except InvalidRequest as e:
        return error_response(400, str(e))
    except ServiceError as e:
        return error_response(500, str(e))
    except Exception:
        logger.exception("Unexpected error during inference")
        return error_response(500, "internal error")

    logger.info(
        "Transcribed %.2fs of audio (format=%s)",
        transcript.duration,
        request.options.response_format,
    )
    return Response(200, body, media_type)
