"""Boundary validation for user messages.

Purpose:
    Provide a deterministic pre-generation check so the resolver never receives
    an empty or oversized message.

Validation model:
    - Rejects non-string input, empty or whitespace-only text, and text longer
      than `MAX_MESSAGE_CHARS` characters.
    - Accepted text is returned unchanged (no trimming or normalization).

Determinism:
    Pure function of its input; no I/O.
"""

from chatbridge.llm.models import ValidationError

MAX_MESSAGE_CHARS = 10_000


def validate_message(raw) -> str:
    """Return `raw` unchanged when it may be forwarded to the resolver.

    Raises:
        ValidationError: for non-string, blank, or oversized input.
    """
    if not isinstance(raw, str):
        raise ValidationError("Message must be a string")

    if not raw.strip():
        raise ValidationError("Message cannot be empty")

    if len(raw) > MAX_MESSAGE_CHARS:
        raise ValidationError(
            f"Message is too long (max {MAX_MESSAGE_CHARS} characters)"
        )

    return raw
