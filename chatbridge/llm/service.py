"""Ordered fallback resolution across Gemini candidate endpoints.

Architectural role:
    Provides the canonical text-generation entrypoint used by orchestration
    (`chatbridge.core.engine`). This module owns the attempt loop; transport
    details live in `chatbridge.llm.client`.

Model call flow:
    message -> for each candidate in order -> `client.send_request(...)` ->
    first success returned / all failures aggregated into `ExhaustionError`.

Retry behavior:
    The only retry is advancing to the next candidate. A candidate is never
    repeated, and attempts never run concurrently, so worst-case latency is
    bounded by `len(candidates) * timeout`.

Determinism:
    Attempt order is fixed by configuration. Generated output remains
    non-deterministic because inference runs remotely.
"""

import logging

from chatbridge.llm import client
from chatbridge.llm.models import (
    AttemptFailure,
    AttemptSuccess,
    BridgeConfig,
    ConfigurationError,
    ExhaustionError,
    TransportError,
)
from chatbridge.llm.provider_config import (
    DEFAULT_TIMEOUT_SECONDS,
    GEMINI_BASE_URL,
    check_key_encoding,
)

logger = logging.getLogger(__name__)


def _attempt(candidate, message, api_key, timeout, base_url):
    """Run one candidate and classify the result as success or failure."""
    try:
        text = client.send_request(
            candidate,
            message,
            api_key,
            timeout=timeout,
            base_url=base_url,
        )
    except TransportError as err:
        return AttemptFailure(
            candidate=candidate,
            reason=err.message,
            status_code=err.status_code,
        )
    return AttemptSuccess(candidate=candidate, text=text)


def resolve(
    message: str,
    api_key,
    candidates,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    base_url: str = GEMINI_BASE_URL,
) -> str:
    """Try each candidate in order and return the first generated text.

    Args:
        message: Validated user message.
        api_key: Gemini credential.
        candidates: Ordered `CandidateEndpoint` sequence.
        timeout: Per-attempt timeout in seconds.
        base_url: Scheme + host of the generation service.

    Returns:
        Generated text of the first successful candidate, unchanged.

    Raises:
        ConfigurationError: blank or non latin-1 credential, or empty
            candidate list. Raised before any network attempt.
        ExhaustionError: every candidate failed; `failures` holds one entry
            per candidate in candidate order.
    """
    if not api_key or not str(api_key).strip():
        raise ConfigurationError("GEMINI_API_KEY not found in environment variables")
    check_key_encoding(api_key)

    candidates = tuple(candidates)
    if not candidates:
        raise ConfigurationError("No Gemini candidate endpoints configured")

    failures = []

    for candidate in candidates:
        logger.info("Trying %s", candidate.label)
        outcome = _attempt(candidate, message, api_key, timeout, base_url)

        if isinstance(outcome, AttemptSuccess):
            logger.info("Success with %s", candidate.label)
            return outcome.text

        if outcome.status_code is not None:
            logger.warning(
                "HTTP %d from %s: %s", outcome.status_code, candidate.label, outcome.reason
            )
        else:
            logger.warning("Attempt on %s failed: %s", candidate.label, outcome.reason)
        failures.append(outcome)

    logger.error("All %d Gemini candidates failed", len(failures))
    raise ExhaustionError(failures)


class FallbackResolver:
    """Resolver bound to one immutable `BridgeConfig`.

    Shared across requests; holds no mutable state, so concurrent callers need
    no locking.
    """

    def __init__(self, config: BridgeConfig):
        self.config = config

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key) and bool(self.config.candidates)

    def resolve(self, message: str) -> str:
        return resolve(
            message,
            self.config.api_key,
            self.config.candidates,
            timeout=self.config.timeout,
            base_url=self.config.base_url,
        )
