"""Unit tests for the logging setup."""

import logging
from unittest.mock import patch

from keybox.frontend.cli.logging_config import configure_logging, resolve_level


def test_resolve_level_default(monkeypatch):
    monkeypatch.delenv("KEYBOX_LOG_LEVEL", raising=False)
    assert resolve_level(logging.WARNING) == logging.WARNING


def test_resolve_level_from_env(monkeypatch):
    monkeypatch.setenv("KEYBOX_LOG_LEVEL", "debug")
    assert resolve_level(logging.WARNING) == logging.DEBUG


def test_resolve_level_ignores_unknown_name(monkeypatch):
    monkeypatch.setenv("KEYBOX_LOG_LEVEL", "chatty")
    assert resolve_level(logging.INFO) == logging.INFO


def test_configure_logging_uses_given_stream(monkeypatch):
    monkeypatch.delenv("KEYBOX_LOG_LEVEL", raising=False)
    stream = object()
    with patch("keybox.frontend.cli.logging_config.logging.basicConfig") as basic:
        configure_logging(logging.DEBUG, stream=stream)
    kwargs = basic.call_args.kwargs
    assert kwargs["level"] == logging.DEBUG
    assert kwargs["stream"] is stream
