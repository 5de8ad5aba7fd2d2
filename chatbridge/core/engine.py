"""Core request orchestration: validate, then resolve.

Architectural role:
    Provides the single execution path used by API/CLI layers to turn one user
    message into generated text.

Control-flow model:
    1. Validate the raw message at the boundary (`safety.validator`).
    2. Run the blocking fallback resolver in a worker thread so the HTTP event
       loop keeps serving other requests while an attempt is in flight.

Error handling strategy:
    Only `ValidationError`, `ConfigurationError` and `ExhaustionError` leave this
    module. Per-attempt transport failures are consumed inside the resolver.

Side effects:
    None beyond outbound HTTP performed by the resolver and its logging.
"""

import asyncio
import logging
from typing import Protocol

from chatbridge.safety.validator import validate_message


logger = logging.getLogger(__name__)


class ResolverProtocol(Protocol):
    """Minimal interface required from a resolver."""

    def resolve(self, message: str) -> str:
        ...


async def process_message(message, resolver: ResolverProtocol) -> str:
    """Validate `message` and return the resolver's text unchanged.

    Raises:
        ValidationError: before any network attempt.
        ConfigurationError / ExhaustionError: propagated from the resolver.
    """
    validated = validate_message(message)
    logger.debug("Dispatching message (%d chars) to resolver", len(validated))
    return await asyncio.to_thread(resolver.resolve, validated)


def process_message_sync(message, resolver: ResolverProtocol) -> str:
    """Blocking variant for callers without an event loop (CLI turns)."""
    validated = validate_message(message)
    return resolver.resolve(validated)
