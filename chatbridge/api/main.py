"""
Process entrypoint for chatbridge.

Architectural role:
- Parses the command line and selects server or interactive mode.
- Configures logging once for the whole process.
- Loads the immutable `BridgeConfig` and hands it to the chosen adapter.

Modes:
- `serve` (default): run the FastAPI app with uvicorn.
- `chat` / `cli` (or `--chat` / `--cli`): interactive terminal session,
  in-process by default or against a running server with `--server URL`.

Error handling strategy:
- A missing API key is logged as a warning in server mode; `/chat` then
  answers with a configuration error while `/health` keeps working.
- A malformed configuration aborts startup with a non-zero exit code.
"""

from dotenv import load_dotenv

load_dotenv()

import argparse
import logging
import os
import sys

import uvicorn

from chatbridge.api.cli import (
    DEFAULT_SERVER_URL,
    make_local_sender,
    make_remote_sender,
    run_interactive_chat,
)
from chatbridge.llm.models import ConfigurationError
from chatbridge.llm.provider_config import load_config
from chatbridge.llm.service import FallbackResolver

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
CHAT_MODES = ("chat", "cli")


def _parse_port(value, default: int) -> int:
    """Best-effort parse of a port from string, falling back to the default."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def configure_logging(level_name=None) -> None:
    level_name = (level_name or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatbridge",
        description="Bridge HTTP or terminal chat to the Gemini API.",
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default="serve",
        choices=("serve",) + CHAT_MODES,
        help="serve (default) or chat/cli for interactive mode",
    )
    parser.add_argument("--chat", "--cli", dest="interactive", action="store_true",
                        help="start interactive mode")
    parser.add_argument("--host", default=os.getenv("CHATBRIDGE_HOST", DEFAULT_HOST))
    parser.add_argument("--port", type=int,
                        default=_parse_port(os.getenv("CHATBRIDGE_PORT"), DEFAULT_PORT))
    parser.add_argument("--server", metavar="URL", default=None,
                        help=f"interactive mode: send turns to a running server "
                             f"(e.g. {DEFAULT_SERVER_URL}) instead of calling Gemini directly")
    return parser


def serve(host: str, port: int, config) -> None:
    """Start the HTTP server for an already-loaded configuration."""
    from chatbridge.api.http_api import create_app

    resolver = FallbackResolver(config)

    if not resolver.is_configured:
        if not config.api_key:
            logger.warning("GEMINI_API_KEY not found in environment variables")
            logger.warning("Please create a .env file with your API key")
        if not config.candidates:
            logger.warning("GEMINI_CANDIDATES is empty; every chat request will fail")

    logger.info("Server running on http://%s:%d", host, port)
    logger.info("POST to /chat with {\"message\": \"your message\"}; health check at /health")

    uvicorn.run(create_app(resolver=resolver), host=host, port=port)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        config = load_config()
    except ConfigurationError as err:
        logger.error("Configuration error: %s", err.message)
        return 2

    if args.interactive or args.mode in CHAT_MODES:
        if args.server:
            sender = make_remote_sender(args.server)
        else:
            sender = make_local_sender(FallbackResolver(config))
        run_interactive_chat(sender)
        return 0

    serve(args.host, args.port, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
