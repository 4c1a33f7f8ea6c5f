"""Small helper to build a KeyBox app context for the console and the TUI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import getpass
import os

from keybox.core.config import Config
from keybox.core.wallet import Wallet
from keybox.frontend.cli.clipboard import ClipboardSink
from keybox.security.password import PasswordPolicy
from keybox.security.session import WalletSession

PASSPHRASE_ENV = "KEYBOX_PASSPHRASE"


@dataclass
class AppContext:
    """Container for runtime objects the UI needs."""

    config: Config
    session: WalletSession
    wallet_name: str
    clipboard: ClipboardSink = field(default_factory=ClipboardSink)
    first_run: bool = False

    @property
    def wallet(self) -> Wallet:
        return self.session.get_wallet()

    @property
    def policy(self) -> PasswordPolicy:
        return PasswordPolicy.from_config(self.config)

    def close(self) -> None:
        # Wipe whatever this session exposed before dropping the secrets.
        self.clipboard.clear()
        self.session.lock()


def read_passphrase(prompt: str = "Enter the passphrase to unlock the wallet: ") -> str:
    """Passphrase from ``KEYBOX_PASSPHRASE`` if set, otherwise asked on the terminal."""
    env = os.getenv(PASSPHRASE_ENV)
    if env:
        return env
    return getpass.getpass(prompt)


def build_context(
    config_path: Optional[str | Path] = None,
    wallet_name: Optional[str] = None,
    passphrase: Optional[str] = None,
    config: Optional[Config] = None,
) -> AppContext:
    """
    Load the configuration and unlock a wallet.

    - The wallet defaults to ``wallet_default`` from the configuration.
    - If ``passphrase`` is not given it is read with :func:`read_passphrase`.
    - When the vault file does not exist yet the context is returned with
      ``first_run=True`` and an empty wallet, which is created on first save.

    Errors from loading the wallet (wrong passphrase, unreadable file)
    propagate to the caller.
    """
    config = config or Config.load(config_path)
    name = wallet_name or config.wallet_default
    path = config.wallet_path(name)
    first_run = not path.exists()

    if passphrase is None:
        passphrase = read_passphrase()

    session = WalletSession.open(name, path, passphrase, create=True)
    return AppContext(config=config, session=session, wallet_name=name, first_run=first_run)
