"""Unit tests for the clipboard sink."""

from unittest.mock import patch

import pytest

from keybox.frontend.cli.clipboard import ClipboardSink, clear_clipboard, copy_to_clipboard


@pytest.fixture
def mock_pyperclip():
    with patch("keybox.frontend.cli.clipboard.pyperclip") as mock:
        yield mock


def test_copy_to_clipboard(mock_pyperclip):
    copy_to_clipboard("hunter2")
    mock_pyperclip.copy.assert_called_once_with("hunter2")


def test_clear_clipboard(mock_pyperclip):
    clear_clipboard()
    mock_pyperclip.copy.assert_called_once_with("")


def test_sink_clears_what_it_copied(mock_pyperclip):
    sink = ClipboardSink()
    sink.copy("secret")
    assert sink.holding

    sink.clear()
    assert not sink.holding
    assert [c.args[0] for c in mock_pyperclip.copy.call_args_list] == ["secret", ""]


def test_sink_clear_without_copy_is_noop(mock_pyperclip):
    """A session that never copied leaves the clipboard alone."""
    ClipboardSink().clear()
    mock_pyperclip.copy.assert_not_called()
