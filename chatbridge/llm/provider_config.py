"""Provider/runtime configuration for the LLM layer.

Architectural role:
    Centralizes credential lookup and the ordered Gemini candidate list for
    `chatbridge.llm.service` and the API adapters.

Model call flow integration:
    - `load_config()` is called once at process start (HTTP app factory, CLI).
    - The resulting `BridgeConfig` is passed into `FallbackResolver`; nothing in
      the LLM layer reads the environment at request time.

Determinism:
    Deterministic for a fixed process environment and `.env` file.

Failure behavior:
    - Missing key material is represented as `None` and rejected by the resolver
      with `ConfigurationError` (the server can still start and report health).
    - Malformed `GEMINI_CANDIDATES` / `GEMINI_TIMEOUT_SECONDS` raise
      `ConfigurationError` immediately.
"""

import os
from dotenv import load_dotenv

from chatbridge.llm.models import (
    ApiVersion,
    BridgeConfig,
    CandidateEndpoint,
    ConfigurationError,
)

load_dotenv()

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"

GEMINI_URL_TEMPLATE = (
    "{base_url}/{api_version}/models/"
    "{model}:generateContent"
)

DEFAULT_TIMEOUT_SECONDS = 30.0

# Models that support generateContent, in order of preference.
DEFAULT_MODELS = (
    "gemini-2.5-flash",
    "gemini-flash-latest",
    "gemini-pro-latest",
    "gemini-2.0-flash",
)

# Versions are the outer loop: every model is tried on v1beta before v1.
DEFAULT_API_VERSIONS = (ApiVersion.V1BETA, ApiVersion.V1)

DEFAULT_CANDIDATES = tuple(
    CandidateEndpoint(api_version=version, model_id=model)
    for version in DEFAULT_API_VERSIONS
    for model in DEFAULT_MODELS
)


def parse_candidates(raw: str) -> tuple:
    """Parse a comma-separated `version/model` list.

    Args:
        raw: Value such as `"v1beta/gemini-2.5-flash, v1/gemini-2.0-flash"`.

    Returns:
        Tuple of `CandidateEndpoint` in the order given. Blank entries are
        skipped, so an empty string yields an empty tuple.

    Raises:
        ConfigurationError: entry without a `/`, empty model id, or an API
            version outside `{v1, v1beta}`.
    """
    candidates = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue

        version, sep, model = entry.partition("/")
        version = version.strip()
        model = model.strip()

        if not sep or not model:
            raise ConfigurationError(
                f"Invalid candidate '{entry}': expected '<api_version>/<model_id>'"
            )

        try:
            api_version = ApiVersion(version)
        except ValueError:
            allowed = ", ".join(v.value for v in ApiVersion)
            raise ConfigurationError(
                f"Invalid API version '{version}' in candidate '{entry}' (allowed: {allowed})"
            ) from None

        candidates.append(CandidateEndpoint(api_version=api_version, model_id=model))

    return tuple(candidates)


def _parse_timeout(raw):
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"GEMINI_TIMEOUT_SECONDS must be a number, got '{raw}'") from None
    if value <= 0:
        raise ConfigurationError("GEMINI_TIMEOUT_SECONDS must be positive")
    return value


def check_key_encoding(value: str, name: str = "GEMINI_API_KEY") -> str:
    """Reject keys that cannot travel in an HTTP header (latin-1 only).

    The offending value is never included in the error message.
    """
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        raise ConfigurationError(
            f"{name} contains characters that cannot be sent in an HTTP header"
        ) from None
    return value


def load_key(name: str = "GEMINI_API_KEY"):
    """Return the stripped API key from the environment, or `None` when unset/blank.

    Raises:
        ConfigurationError: the key contains non latin-1 characters.
    """
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return check_key_encoding(value, name)


def load_config() -> BridgeConfig:
    """Build the immutable process configuration from the environment.

    Resolution:
        1. `GEMINI_API_KEY` -> `api_key` (may be `None`).
        2. `GEMINI_CANDIDATES` -> `candidates`; unset keeps `DEFAULT_CANDIDATES`.
        3. `GEMINI_TIMEOUT_SECONDS` -> `timeout` (default 30s).
        4. `GEMINI_BASE_URL` -> `base_url` (trailing slash removed).

    Raises:
        ConfigurationError: malformed candidate list, timeout value or API key.
    """
    raw_candidates = os.getenv("GEMINI_CANDIDATES")
    if raw_candidates is None:
        candidates = DEFAULT_CANDIDATES
    else:
        candidates = parse_candidates(raw_candidates)

    base_url = (os.getenv("GEMINI_BASE_URL") or GEMINI_BASE_URL).rstrip("/")

    return BridgeConfig(
        api_key=load_key(),
        candidates=candidates,
        timeout=_parse_timeout(os.getenv("GEMINI_TIMEOUT_SECONDS")),
        base_url=base_url,
    )
