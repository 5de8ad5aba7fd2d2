"""
HTTP API adapter for the chatbridge resolver.

Architectural role:
- Expose a liveness probe and a single chat endpoint.
- Enforce adapter-level input parsing before delegating to the core layer.
- Delegate validation + generation to `chatbridge.core.engine.process_message`.
- Map the error taxonomy to HTTP status codes and a JSON error envelope.

Endpoint responsibilities:
- `GET /`, `GET /health`: plain-text liveness token `OK`.
- `POST /chat`: parse `{"message": str}`, invoke core, return `{"response": str}`.

API request lifecycle (`POST /chat`):
1. Parse request JSON; body must be an object with a `message` field.
2. Forward the message to `process_message` with the app's resolver.
3. Return the generated text unchanged, or an error envelope.

Error handling strategy:
- Malformed body / validation failure -> HTTP 400, kind `validation_error`.
- Missing credential or empty candidate list -> HTTP 500, kind `configuration_error`.
- All candidates failed -> HTTP 503, kind `exhaustion_error` with per-candidate
  `attempts` for diagnostics.

Side effects:
- Loads environment variables at import time via `load_dotenv()`.
- Logs request/response text at INFO only when `DEBUG == "true"`.
- The module-level `app` is built on first access, so importing this module
  never reads candidate configuration.
"""

from dotenv import load_dotenv

load_dotenv()

import os
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from chatbridge.core.engine import process_message
from chatbridge.llm.models import (
    BridgeError,
    ConfigurationError,
    ExhaustionError,
    ValidationError,
)
from chatbridge.llm.provider_config import load_config
from chatbridge.llm.service import FallbackResolver

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    ConfigurationError: 500,
    ExhaustionError: 503,
}


# ============================================================
# Request / Response Schema
# ============================================================

class ChatRequest(BaseModel):
    """Reference schema for the `POST /chat` body.

    The endpoint parses JSON by hand and answers malformed bodies with the 400
    error envelope; this model only documents the accepted shape.
    """
    message: str


class ChatResponse(BaseModel):
    response: str


def error_response(err: BridgeError) -> JSONResponse:
    """Render a `BridgeError` as `{"error", "kind"[, "attempts"]}`."""
    content = {"error": err.message, "kind": err.kind}
    if isinstance(err, ExhaustionError):
        content["attempts"] = err.summary()

    status_code = 500
    for error_type, code in ERROR_STATUS.items():
        if isinstance(err, error_type):
            status_code = code
            break

    return JSONResponse(status_code=status_code, content=content)


# ============================================================
# App Factory
# ============================================================

def create_app(config=None, resolver=None, debug=None) -> FastAPI:
    """
    Build the FastAPI application around one resolver.

    Args:
        config: `BridgeConfig`; loaded from the environment when omitted.
        resolver: Object with `resolve(message) -> str`; defaults to a
            `FallbackResolver` over `config`. Tests inject fakes here.
        debug: Log message and result text at INFO; defaults to
            `DEBUG == "true"` in the environment.
    """
    if debug is None:
        debug = os.getenv("DEBUG") == "true"

    if resolver is None:
        resolver = FallbackResolver(config if config is not None else load_config())

    api = FastAPI(title="chatbridge")
    api.state.resolver = resolver

    @api.get("/", response_class=PlainTextResponse)
    @api.get("/health", response_class=PlainTextResponse)
    def health():
        """Liveness probe; does not touch the generation service."""
        return "OK"

    @api.post("/chat", response_model=ChatResponse)
    async def chat(request: Request):
        """
        Chat endpoint.

        Input validation behavior:
        - Non-JSON body or non-object JSON -> HTTP 400.
        - Missing `message` or non-string value -> HTTP 400.
        - Empty / whitespace-only / oversized message -> HTTP 400 (from core).
        """
        try:
            body = await request.json()
        except ValueError:
            return error_response(ValidationError("Request body must be valid JSON"))

        if not isinstance(body, dict) or "message" not in body:
            return error_response(ValidationError("Request body must contain a 'message' field"))

        message = body["message"]

        if debug:
            logger.info("Incoming message: %r", message)

        try:
            result = await process_message(message, request.app.state.resolver)
        except ExhaustionError as err:
            logger.error("Error calling Gemini API: %s", err.message)
            return error_response(err)
        except BridgeError as err:
            logger.warning("Rejected chat request (%s): %s", err.kind, err.message)
            return error_response(err)

        if debug:
            logger.info("Final result: %r", result)

        return ChatResponse(response=result)

    return api


_app = None


def get_app() -> FastAPI:
    """Return the shared application, building it from the environment once."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


def __getattr__(name):
    # `uvicorn chatbridge.api.http_api:app`
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
