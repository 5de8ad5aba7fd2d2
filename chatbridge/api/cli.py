"""
Interactive CLI adapter for chatbridge.

Architectural role:
- Provides a terminal read-prompt-respond loop.
- Delegates every turn either to the in-process core engine or, in remote mode,
  to a running bridge's `POST /chat` endpoint.

Request lifecycle (per user turn):
1. Read a single line from stdin.
2. Ignore empty input; stop on `exit` / `quit` with a farewell message.
3. Forward anything else to the active sender.
4. Print `Bot: <text>` or `Error: <message>` and continue.

Error handling strategy:
- `BridgeError` from a turn is printed and the loop continues.
- EOF and keyboard interrupts terminate the loop without traceback output.

Side effects:
- Writes to stdout/stderr for operator feedback.
"""

import sys
import logging

import requests

from chatbridge.core.engine import process_message_sync
from chatbridge.llm.models import BridgeError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:3000"
REMOTE_TIMEOUT_SECONDS = 300
EXIT_COMMANDS = ("exit", "quit")


# =========================================================
# UTF-8 SAFE STDOUT
# Configures best-effort UTF-8 console output without failing startup.
# =========================================================

def _configure_stdout():
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
        except (AttributeError, ValueError, OSError):
            logger.debug("stdout reconfiguration not supported")


# =========================================================
# SENDERS
# =========================================================

def make_local_sender(resolver):
    """Return a sender that validates and resolves in-process."""

    def send(message: str) -> str:
        return process_message_sync(message, resolver)

    return send


def send_chat_request(message: str, server_url: str = DEFAULT_SERVER_URL) -> str:
    """
    Forward one message to a running bridge and return its `response` text.

    Error handling strategy:
    - Connection failures -> `TransportError` naming the server URL.
    - Non-2xx -> `TransportError` with the server's error text.
    - 2xx without a string `response` -> `TransportError`.
    """
    url = server_url.rstrip("/") + "/chat"

    try:
        response = requests.post(
            url,
            json={"message": message},
            timeout=REMOTE_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as err:
        raise TransportError(
            f"Failed to connect to server: {err}. "
            f"Make sure the server is running at {server_url}."
        ) from None

    if not 200 <= response.status_code < 300:
        error_text = response.text or "Unknown error"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            error_text = body["error"]
        raise TransportError(f"Server error: {error_text}", status_code=response.status_code)

    try:
        body = response.json()
    except ValueError as err:
        raise TransportError(f"Failed to parse response: {err}") from None

    text = body.get("response") if isinstance(body, dict) else None
    if not isinstance(text, str):
        raise TransportError("Invalid response format")

    return text


def make_remote_sender(server_url: str = DEFAULT_SERVER_URL):
    def send(message: str) -> str:
        return send_chat_request(message, server_url)

    return send


# =========================================================
# MAIN APPLICATION LOOP
# =========================================================

def run_interactive_chat(send) -> None:
    """
    Run the interactive terminal session until exit, EOF or interrupt.

    Args:
        send: Callable `message -> text`; raises `BridgeError` on failure.
    """
    _configure_stdout()

    print("Gemini chat bridge - Interactive Mode")
    print("Type 'exit' or 'quit' to end the conversation\n")

    while True:

        try:
            message = input("You: ").strip()

        except EOFError:
            print("\nGoodbye!")
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not message:
            continue

        if message.lower() in EXIT_COMMANDS:
            print("Goodbye!")
            break

        try:
            response = send(message)
        except BridgeError as err:
            print(f"Error: {err.message}\n", file=sys.stderr)
            continue
        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        print(f"Bot: {response}\n")
