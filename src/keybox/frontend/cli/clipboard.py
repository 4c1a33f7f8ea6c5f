"""Clipboard utilities for the CLI frontend.

Uses pyperclip for cross-platform clipboard access.
"""

from __future__ import annotations

import logging

import pyperclip

logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str) -> None:
    """Copy text to the system clipboard.

    Args:
        text: The text to copy.

    Raises:
        pyperclip.PyperclipException: If clipboard access fails.
    """
    pyperclip.copy(text)


def clear_clipboard() -> None:
    """Overwrite the system clipboard with an empty string."""
    pyperclip.copy("")


class ClipboardSink:
    """Receives secrets for the user to paste and remembers to wipe them.

    ``clear()`` only touches the clipboard if something was copied through
    this sink, so quitting a session that never copied anything leaves the
    user's clipboard alone.
    """

    def __init__(self):
        self.holding = False

    def copy(self, text: str) -> None:
        copy_to_clipboard(text)
        self.holding = True

    def clear(self) -> None:
        if not self.holding:
            return
        clear_clipboard()
        self.holding = False
        logger.debug("clipboard cleared")
