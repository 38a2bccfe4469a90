"""FastAPI HTTP surface for the sttgate service.

The Authorization header is checked before the request body is touched, so
an unauthenticated client gets 401 without its upload being read or its form
being validated. Handlers then run on the default executor; concurrent
requests really execute in parallel and meet only at the engine dispatcher.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import FormData, UploadFile

from sttgate import handlers
from sttgate.auth import header_text, is_allowed
from sttgate.context import ServerContext
from sttgate.engine.protocol import InferenceOptions
from sttgate.errors import EngineFailure, InvalidRequest
from sttgate.handlers import Response

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"", "0", "false", "no", "off"}


def to_http(response: Response) -> JSONResponse | PlainTextResponse:
    if isinstance(response.body, str):
        return PlainTextResponse(
            response.body, status_code=response.status_code, media_type=response.media_type
        )
    return JSONResponse(response.body, status_code=response.status_code)


def authorization_header(request: Request) -> str | None:
    return header_text(request.headers.get("authorization"))


def form_text(form: FormData, name: str) -> str | None:
    value = form.get(name)
    return value if isinstance(value, str) else None


def parse_inference_options(form: FormData, default_language: str) -> InferenceOptions:
    """Build InferenceOptions from multipart fields.

    Raises:
        InvalidRequest: ``temperature`` is not a number or ``translate`` is not
            a boolean.
    """
    raw_temperature = form_text(form, "temperature")
    try:
        temperature = float(raw_temperature) if raw_temperature else 0.0
    except ValueError:
        raise InvalidRequest(f"temperature must be a number, got '{raw_temperature}'") from None

    raw_translate = (form_text(form, "translate") or "").strip().lower()
    if raw_translate in _TRUE:
        translate = True
    elif raw_translate in _FALSE:
        translate = False
    else:
        raise InvalidRequest(f"translate must be a boolean, got '{raw_translate}'")

    return InferenceOptions(
        language=form_text(form, "language") or default_language,
        translate=translate,
        temperature=temperature,
        prompt=form_text(form, "prompt") or None,
        response_format=form_text(form, "response_format") or "json",
    )


def create_app(context: ServerContext) -> FastAPI:
    """Create a FastAPI application serving ``context``.

    If the configuration names a model, it is loaded during startup through the
    same path as the load endpoint. A failed startup load leaves the engine in
    the error state; the server keeps running so a client can retry.
    """
    config = context.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.model_path:
            loop = asyncio.get_event_loop()
            try:
                await loop.run_in_executor(None, context.load_model, config.model_path)
            except EngineFailure as e:
                logger.error("Startup model load failed: %s", e)
        yield

    async def run_handler(handler, handler_request) -> JSONResponse | PlainTextResponse:
        loop = asyncio.get_event_loop()
        response = await loop.run_in_executor(None, handler, handler_request, context)
        return to_http(response)

    app = FastAPI(title="sttgate", lifespan=lifespan)
    router = APIRouter()

    @router.get("/health")
    def health(request: Request):
        """Liveness probe."""
        health_request = handlers.HealthRequest(authorization_header(request))
        return to_http(handlers.health(health_request, context))

    @router.post("/load")
    async def load(request: Request):
        """Load or reload the engine model."""
        authorization = authorization_header(request)
        if not is_allowed(authorization, context.credential):
            return to_http(handlers.unauthorized("load"))

        async with request.form() as form:
            model = form_text(form, "model")
        return await run_handler(
            handlers.load, handlers.LoadRequest(model=model, authorization=authorization)
        )

    @router.post("/inference")
    async def inference(request: Request):
        """Transcribe an uploaded audio file."""
        authorization = authorization_header(request)
        if not is_allowed(authorization, context.credential):
            return to_http(handlers.unauthorized("inference"))

        async with request.form() as form:
            try:
                options = parse_inference_options(form, config.language)
            except InvalidRequest as e:
                return to_http(handlers.error_response(400, str(e)))

            upload = form.get("file")
            audio = await upload.read() if isinstance(upload, UploadFile) else None

        return await run_handler(
            handlers.inference,
            handlers.InferenceRequest(audio=audio, options=options, authorization=authorization),
        )

    app.include_router(router, prefix=config.request_path)
    return app
