"""Gemini transport client for a single generation attempt.

Architectural role:
    Executes one HTTP request against one `CandidateEndpoint` and normalizes the
    outcome into either the generated text or a `TransportError`.

Model invocation flow:
    `service.resolve` -> `send_request(candidate, message, ...)` -> POST
    `{base_url}/{version}/models/{model}:generateContent` -> parsed text.

Retry behavior:
    No retry loop is implemented here. Each call is attempted once; fallback
    across candidates lives in `service`.

Timeout model:
    The configured timeout is a wall-clock budget for the whole attempt
    (connect, headers and body). The exchange runs on a worker thread that the
    caller stops waiting for once the budget is spent.

Determinism:
    URL and payload construction are deterministic for fixed inputs. Output
    text remains non-deterministic due to remote model inference.

Failure handling model:
    Every failure mode (timeout, connection error, non-2xx status, unparseable
    or empty 2xx body) raises `TransportError` with a sanitized message. The API
    key travels in a header and is never part of the URL or error text.
"""

import requests
import json
import threading
import time

from chatbridge.llm.models import CandidateEndpoint, TransportError
from chatbridge.llm.provider_config import (
    GEMINI_BASE_URL,
    GEMINI_URL_TEMPLATE,
    DEFAULT_TIMEOUT_SECONDS,
)

# Upper bound on raw error bodies copied into diagnostics.
MAX_ERROR_BODY_CHARS = 300

CHUNK_SIZE = 1024


def build_url(candidate: CandidateEndpoint, base_url: str = GEMINI_BASE_URL) -> str:
    return GEMINI_URL_TEMPLATE.format(
        base_url=base_url.rstrip("/"),
        api_version=candidate.api_version.value,
        model=candidate.model_id,
    )


def build_payload(message: str) -> dict:
    """Wrap the user message in the `generateContent` request envelope."""
    return {
        "contents": [
            {"parts": [{"text": message}]}
        ]
    }


def _describe_error_body(status_code: int, body: str) -> str:
    """Build a diagnostic string for a non-2xx response.

    Structured Gemini errors (`{"error": {"code", "message", "status"}}`) are
    rendered as `STATUS (code): message`; anything else falls back to the
    truncated raw body.
    """
    try:
        data = json.loads(body)
    except ValueError:
        data = None

    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        error = data["error"]
        status = error.get("status") or "ERROR"
        code = error.get("code", status_code)
        message = error.get("message") or ""
        return f"{status} ({code}): {message}"

    text = (body or "").strip() or "Unknown error"
    if len(text) > MAX_ERROR_BODY_CHARS:
        text = text[:MAX_ERROR_BODY_CHARS] + "..."
    return f"HTTP {status_code}: {text}"


def extract_text(data) -> str:
    """Return `candidates[0].content.parts[0].text` from a response body.

    Raises:
        TransportError: when the structure is missing, the text is not a
            string, or the text is empty.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise TransportError("Response did not contain generated text") from None

    if not isinstance(text, str) or not text:
        raise TransportError("Response contained empty generated text")

    return text


def _read_body(response, deadline: float, cancelled, timeout: float) -> bytes:
    """Read a streamed body, giving up once the attempt deadline has passed."""
    chunks = []
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        if cancelled.is_set() or time.monotonic() > deadline:
            raise TransportError(f"Request timed out after {timeout:g}s")
        chunks.append(chunk)
    return b"".join(chunks)


def _post(url, headers, payload, timeout, deadline, cancelled):
    """Perform the POST and return `(status_code, body_bytes, encoding)`."""
    try:
        with requests.post(
            url,
            headers=headers,
            json=payload,
            stream=True,
            timeout=timeout,
        ) as response:
            body = _read_body(response, deadline, cancelled, timeout)
            return response.status_code, body, response.encoding
    except requests.exceptions.Timeout:
        raise TransportError(f"Request timed out after {timeout:g}s") from None
    except requests.exceptions.ConnectionError as err:
        # Body read timeouts surface as ConnectionError from iter_content.
        if cancelled.is_set() or time.monotonic() >= deadline:
            raise TransportError(f"Request timed out after {timeout:g}s") from None
        raise TransportError(f"Connection error: {type(err).__name__}") from None
    except requests.exceptions.RequestException as err:
        raise TransportError(f"Request failed: {type(err).__name__}") from None


def _run_with_deadline(func, timeout: float):
    """Run `func(cancelled)` on a daemon thread and wait at most `timeout` seconds.

    `requests` timeouts bound the connect phase and each socket read, not the
    whole exchange. The join below bounds the attempt in wall-clock time; an
    abandoned worker sees `cancelled` at its next chunk and closes its
    connection.
    """
    outcome = {}
    cancelled = threading.Event()

    def target():
        try:
            outcome["value"] = func(cancelled)
        except BaseException as err:
            outcome["error"] = err

    worker = threading.Thread(target=target, name="chatbridge-attempt", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        cancelled.set()
        raise TransportError(f"Request timed out after {timeout:g}s")

    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


def send_request(
    candidate: CandidateEndpoint,
    message: str,
    api_key: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    base_url: str = GEMINI_BASE_URL,
) -> str:
    """Send one `generateContent` request and return the generated text unchanged.

    Args:
        candidate: Endpoint (API version + model) to address.
        message: Validated user message, forwarded as the prompt text.
        api_key: Gemini credential, sent as `x-goog-api-key`.
        timeout: Wall-clock budget for the whole attempt, in seconds.
        base_url: Scheme + host of the generation service.

    Returns:
        Generated text exactly as returned by the provider (no stripping).

    Failure scenarios:
        - Deadline exceeded (slow connect, stalled or trickling body) /
          connection / other request exceptions -> `TransportError` without
          status code. Partial bodies are discarded.
        - Non-2xx status -> `TransportError` carrying `status_code`.
        - 2xx with non-JSON body or missing/empty text -> `TransportError`.
    """
    url = build_url(candidate, base_url)

    headers = {
        "x-goog-api-key": api_key,
        "Content-Type": "application/json",
    }
    payload = build_payload(message)
    deadline = time.monotonic() + timeout

    status_code, body, encoding = _run_with_deadline(
        lambda cancelled: _post(url, headers, payload, timeout, deadline, cancelled),
        timeout,
    )
    text = body.decode(encoding or "utf-8", errors="replace")

    if not 200 <= status_code < 300:
        raise TransportError(
            _describe_error_body(status_code, text),
            status_code=status_code,
        )

    try:
        data = json.loads(text)
    except ValueError:
        raise TransportError("Response body was not valid JSON") from None

    return extract_text(data)
