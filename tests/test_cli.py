"""Tests for the interactive terminal adapter."""

from unittest.mock import Mock, patch

import pytest
import requests

from chatbridge.api import cli
from chatbridge.llm.models import ExhaustionError, TransportError, ValidationError
from helpers import make_response


def feed(monkeypatch, *lines):
    """Make `input()` return `lines` in order, then raise EOFError."""
    remaining = list(lines)

    def fake_input(prompt=""):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)


class TestInteractiveLoop:
    def test_prints_bot_reply_and_exits(self, monkeypatch, capsys):
        feed(monkeypatch, "Hello", "exit", "never read")
        send = Mock(return_value="Hi there")

        cli.run_interactive_chat(send)

        out = capsys.readouterr().out
        assert "Bot: Hi there" in out
        assert out.rstrip().endswith("Goodbye!")
        send.assert_called_once_with("Hello")

    @pytest.mark.parametrize("command", ["exit", "QUIT", "Exit"])
    def test_exit_commands_are_case_insensitive(self, monkeypatch, capsys, command):
        feed(monkeypatch, command)
        send = Mock()

        cli.run_interactive_chat(send)

        assert "Goodbye!" in capsys.readouterr().out
        send.assert_not_called()

    def test_empty_input_is_ignored(self, monkeypatch):
        feed(monkeypatch, "", "   ", "quit")
        send = Mock()

        cli.run_interactive_chat(send)

        send.assert_not_called()

    def test_errors_are_printed_and_loop_continues(self, monkeypatch, capsys):
        feed(monkeypatch, "first", "second", "exit")
        send = Mock(side_effect=[ExhaustionError([]), "ok"])

        cli.run_interactive_chat(send)

        captured = capsys.readouterr()
        assert "Error: Failed to get response from Gemini API" in captured.err
        assert "Bot: ok" in captured.out
        assert send.call_count == 2

    def test_eof_ends_session(self, monkeypatch, capsys):
        feed(monkeypatch)

        cli.run_interactive_chat(Mock())

        assert "Goodbye!" in capsys.readouterr().out

    def test_keyboard_interrupt_ends_session(self, monkeypatch, capsys):
        def interrupted(prompt=""):
            raise KeyboardInterrupt

        monkeypatch.setattr("builtins.input", interrupted)

        cli.run_interactive_chat(Mock())

        assert "Interrupted." in capsys.readouterr().out

    def test_keyboard_interrupt_while_waiting_for_reply(self, monkeypatch, capsys):
        feed(monkeypatch, "Hello", "never read")
        send = Mock(side_effect=KeyboardInterrupt)

        cli.run_interactive_chat(send)

        out = capsys.readouterr().out
        assert "Interrupted." in out
        assert "Bot:" not in out
        send.assert_called_once_with("Hello")


class TestLocalSender:
    def test_validates_before_resolving(self):
        resolver = Mock()
        send = cli.make_local_sender(resolver)

        with pytest.raises(ValidationError):
            send("x" * 10_001)

        resolver.resolve.assert_not_called()

    def test_returns_resolver_text(self):
        resolver = Mock()
        resolver.resolve.return_value = "answer"

        assert cli.make_local_sender(resolver)("question") == "answer"


class TestRemoteSender:
    @patch("chatbridge.api.cli.requests.post")
    def test_posts_to_chat_endpoint(self, mock_post):
        mock_post.return_value = make_response(200, {"response": "remote answer"})

        assert cli.send_chat_request("Hi", "http://bridge.test/") == "remote answer"
        args, kwargs = mock_post.call_args
        assert args[0] == "http://bridge.test/chat"
        assert kwargs["json"] == {"message": "Hi"}

    @patch("chatbridge.api.cli.requests.post")
    def test_connection_failure(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TransportError) as exc_info:
            cli.send_chat_request("Hi", "http://localhost:3000")

        assert exc_info.value.message.startswith("Failed to connect to server")
        assert "http://localhost:3000" in exc_info.value.message

    @patch("chatbridge.api.cli.requests.post")
    def test_server_error_uses_envelope_message(self, mock_post):
        mock_post.return_value = make_response(
            400, {"error": "Message cannot be empty", "kind": "validation_error"}
        )

        with pytest.raises(TransportError) as exc_info:
            cli.send_chat_request("Hi")

        assert exc_info.value.message == "Server error: Message cannot be empty"
        assert exc_info.value.status_code == 400

    @patch("chatbridge.api.cli.requests.post")
    def test_server_error_plain_text(self, mock_post):
        mock_post.return_value = make_response(502, text="Bad Gateway")

        with pytest.raises(TransportError) as exc_info:
            cli.send_chat_request("Hi")

        assert exc_info.value.message == "Server error: Bad Gateway"

    @pytest.mark.parametrize("body", [{"answer": "x"}, {"response": 1}, ["x"]])
    @patch("chatbridge.api.cli.requests.post")
    def test_invalid_response_format(self, mock_post, body):
        mock_post.return_value = make_response(200, body)

        with pytest.raises(TransportError) as exc_info:
            cli.send_chat_request("Hi")

        assert exc_info.value.message == "Invalid response format"
