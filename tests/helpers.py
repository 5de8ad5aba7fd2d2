"""Shared builders for mocked Gemini / bridge HTTP responses."""

import json
from unittest.mock import MagicMock

import requests


def make_response(status_code=200, json_body=None, text=None):
    """Build a mock `requests.Response`.

    Works both as a plain response (`.json()`, `.text`) and as a streamed one
    used in a `with` block (`.iter_content()`). Without `json_body`, `.json()`
    raises `ValueError` like a non-JSON body.
    """
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.encoding = "utf-8"

    if json_body is not None:
        response.json.return_value = json_body
        if text is None:
            text = json.dumps(json_body)
    else:
        response.json.side_effect = ValueError("Expecting value")

    response.text = text if text is not None else ""
    raw = response.text.encode("utf-8")
    response.iter_content.side_effect = lambda *args, **kwargs: iter([raw] if raw else [])
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def gemini_error(code, status, message):
    return {"error": {"code": code, "message": message, "status": status}}
