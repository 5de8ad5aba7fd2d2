"""Test configuration and shared fixtures."""

import os
from unittest.mock import patch

import pytest

from chatbridge.llm.models import ApiVersion, BridgeConfig, CandidateEndpoint


ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_CANDIDATES",
    "GEMINI_TIMEOUT_SECONDS",
    "GEMINI_BASE_URL",
    "CHATBRIDGE_HOST",
    "CHATBRIDGE_PORT",
    "LOG_LEVEL",
    "DEBUG",
)


@pytest.fixture
def clean_env():
    """Environment without any chatbridge variables (ignores a local .env)."""
    env = {k: v for k, v in os.environ.items() if k not in ENV_VARS}
    with patch.dict(os.environ, env, clear=True):
        yield env


@pytest.fixture
def candidates():
    return (
        CandidateEndpoint(ApiVersion.V1BETA, "model-a"),
        CandidateEndpoint(ApiVersion.V1BETA, "model-b"),
        CandidateEndpoint(ApiVersion.V1, "model-c"),
    )


@pytest.fixture
def config(candidates):
    return BridgeConfig(
        api_key="test-api-key",
        candidates=candidates,
        timeout=5.0,
        base_url="https://gemini.test",
    )
