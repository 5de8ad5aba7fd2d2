"""Data contracts and error taxonomy for the LLM layer.

Architectural role:
    Defines the immutable records exchanged between configuration, transport
    (`chatbridge.llm.client`) and the fallback resolver (`chatbridge.llm.service`),
    plus the exception hierarchy surfaced to API/CLI adapters.

Error propagation:
    - `ConfigurationError`, `ValidationError`, `ExhaustionError` cross component
      boundaries and are rendered by adapters.
    - `TransportError` is raised per attempt by the client and consumed by the
      resolver loop; it is only visible as an `AttemptFailure` summary.

Determinism:
    All records are frozen dataclasses with no side effects.
"""

from dataclasses import dataclass, field
from enum import Enum


class ApiVersion(str, Enum):
    """Gemini REST API versions a candidate may address."""

    V1 = "v1"
    V1BETA = "v1beta"


@dataclass(frozen=True)
class CandidateEndpoint:
    """One (API version, model identifier) pair the resolver may attempt."""

    api_version: ApiVersion
    model_id: str

    @property
    def label(self) -> str:
        return f"{self.api_version.value}/{self.model_id}"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class AttemptSuccess:
    candidate: CandidateEndpoint
    text: str


@dataclass(frozen=True)
class AttemptFailure:
    """Recorded reason one candidate did not produce text.

    Attributes:
        candidate: Endpoint that was attempted.
        reason: Human-readable failure description (never contains the key).
        status_code: HTTP status for non-2xx responses, `None` for transport
            failures and unparseable 2xx bodies.
    """

    candidate: CandidateEndpoint
    reason: str
    status_code: int | None = None

    def to_dict(self) -> dict:
        return {
            "candidate": self.candidate.label,
            "status_code": self.status_code,
            "reason": self.reason,
        }


class BridgeError(Exception):
    """Base exception for chatbridge failures."""

    kind = "bridge_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(BridgeError):
    """Missing credential, empty or malformed candidate list."""

    kind = "configuration_error"


class ValidationError(BridgeError):
    """User message rejected at the boundary."""

    kind = "validation_error"


class TransportError(BridgeError):
    """Single-attempt failure: network, timeout, non-2xx, or unusable payload."""

    kind = "transport_error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ExhaustionError(BridgeError):
    """Every candidate failed; carries one failure per candidate, in order."""

    kind = "exhaustion_error"

    def __init__(self, failures, message: str | None = None):
        self.failures = tuple(failures)
        super().__init__(
            message
            or (
                "Failed to get response from Gemini API after "
                f"{len(self.failures)} attempt(s). "
                "Please check your API key and model availability."
            )
        )

    def summary(self) -> list[dict]:
        return [failure.to_dict() for failure in self.failures]


@dataclass(frozen=True)
class BridgeConfig:
    """Immutable process configuration passed explicitly into the resolver.

    Attributes:
        api_key: Gemini API key; `None` or blank is rejected at resolve time.
        candidates: Ordered attempt sequence; first entry is tried first.
        timeout: Per-attempt timeout in seconds.
        base_url: Scheme + host of the generation service.
    """

    api_key: str | None
    candidates: tuple[CandidateEndpoint, ...] = field(default_factory=tuple)
    timeout: float = 30.0
    base_url: str = "https://generativelanguage.googleapis.com"
