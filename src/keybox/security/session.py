"""Scoped owner of an unlocked wallet.

A WalletSession holds the only reference to the unlocked Wallet (and so to
the passphrase and decrypted entries). get_wallet() returns it while the
session is unlocked; otherwise it raises SessionLockedError.
lock() drops the passphrase and entries. Use the session as a context manager
so teardown happens even when the caller fails.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..core.exceptions import SessionLockedError
from ..core.wallet import Wallet

logger = logging.getLogger(__name__)


class WalletSession:
    def __init__(self, wallet: Wallet):
        self._wallet: Optional[Wallet] = wallet

    @classmethod
    def open(
        cls,
        name: str,
        path: str | Path,
        passphrase: str,
        create: bool = False,
    ) -> "WalletSession":
        """Unlock the wallet at ``path`` and wrap it in a session.

        If ``create`` is set and no vault file exists yet, an empty wallet is
        returned instead of failing; it is written on the first save().
        Errors from Wallet.load() propagate unchanged.
        """
        wallet = Wallet(name=name, path=path, passphrase=passphrase)
        if create and not wallet.exists():
            logger.info("wallet %s does not exist yet, starting empty", name)
        else:
            wallet.load()
        return cls(wallet)

    @property
    def locked(self) -> bool:
        return self._wallet is None

    def get_wallet(self) -> Wallet:
        """Return the unlocked wallet or raise if locked."""
        if self._wallet is None:
            raise SessionLockedError("Session is locked")
        return self._wallet

    def lock(self) -> None:
        """Drop the passphrase and entries and lock the session."""
        try:
            if self._wallet is not None:
                self._wallet.close()
                logger.debug("session locked")
        finally:
            self._wallet = None

    def __enter__(self) -> "WalletSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.lock()
