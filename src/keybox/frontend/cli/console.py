"""Line-mode console for KeyBox.

Start here with `keybox --help` (or `python -m keybox.frontend.cli.console`).
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from keybox.core.config import Config
from keybox.core.exceptions import (
    InputTimeoutError,
    KeyBoxError,
    OTPNotConfiguredError,
    StorageUnavailableError,
)
from keybox.core.models import Entry
from keybox.frontend.cli.context import AppContext, build_context
from keybox.frontend.cli.logging_config import configure_logging
from keybox.security.password import PasswordPolicy

logger = logging.getLogger(__name__)

NO_GROUP = "(no group)"


def race_input(reader: Callable[[], str], timeout: float, on_expire: Optional[Callable[[], None]] = None) -> str:
    """Run ``reader`` in a background thread and wait at most ``timeout`` seconds.

    Exactly one outcome happens:
    - the reader answers first: its value is returned and ``on_expire`` never runs
    - the deadline passes first: ``on_expire`` runs, then InputTimeoutError is raised

    A reader that answers after the deadline is ignored. Errors raised by the
    reader are re-raised in the caller.
    """
    done = threading.Event()
    outcome = {}

    def worker() -> None:
        try:
            outcome["value"] = reader()
        except Exception as err:
            outcome["error"] = err
        done.set()

    threading.Thread(target=worker, daemon=True).start()
    done.wait(max(0.0, timeout))

    # Decided once, here; a late answer only sets an event nobody waits on.
    if done.is_set():
        if "error" in outcome:
            raise outcome["error"]
        return outcome["value"]

    if on_expire is not None:
        on_expire()
    raise InputTimeoutError(f"no answer after {timeout:.0f} seconds")


def format_table(headers: Sequence[str], rows: List[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells):
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    out = [line(headers), line(["-" * w for w in widths])]
    out.extend(line(row) for row in rows)
    return "\n".join(out)


class Console:
    """Interactive commands over an unlocked wallet."""

    def __init__(
        self,
        ctx: AppContext,
        pattern: str = "",
        group: str = "",
        random_password: bool = False,
        ask: Callable[[str], str] = input,
        ask_secret: Callable[[str], str] = getpass.getpass,
    ):
        self.ctx = ctx
        self.pattern = pattern
        self.group = group
        self.random_password = random_password
        self._ask = ask
        self._ask_secret = ask_secret

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------

    def prompt(self, text: str, default: str = "", show: bool = True) -> str:
        answer = self._ask(text) if show else self._ask_secret(text)
        return answer if answer else default

    def print_entries(self, entries: List[Entry]) -> None:
        tables = {}
        for i, entry in enumerate(entries):
            otp = "X" if entry.has_otp() else ""
            tables.setdefault(entry.group or NO_GROUP, []).append(
                [str(i), entry.name, entry.uri, entry.user, otp, entry.comment]
            )

        for group, rows in tables.items():
            print(f"\n{group}\n")
            print(format_table(["", "Name", "URI", "User", "OTP", "Comment"], rows))
            print("")

    def select_entry(self) -> Optional[Entry]:
        entries = self.ctx.wallet.search(self.pattern, self.group)
        if not entries:
            print("no entry found")
            return None

        self.print_entries(entries)
        if len(entries) == 1:
            return entries[0]

        def read_index() -> int:
            while True:
                answer = self.prompt("Select the entry: ")
                if answer.isascii() and answer.isdigit() and int(answer) < len(entries):
                    return int(answer)
                print("your choice is not an integer or is out of range")

        index = race_input(read_index, self.ctx.config.select_timeout)
        return entries[index]

    def _new_password(self, current: str = "") -> str:
        if self.random_password:
            return self.ctx.policy.generate()
        return self.prompt("Enter the new password: ", current, show=False)

    # ------------------------------------------------------------------
    # Commands; each returns the process exit status
    # ------------------------------------------------------------------

    def list_entries(self) -> int:
        entries = self.ctx.wallet.search(self.pattern, self.group)
        if not entries:
            print("no entry found")
            return 1
        self.print_entries(entries)
        return 0

    def list_groups(self) -> int:
        for group in self.ctx.wallet.groups():
            print(group)
        return 0

    def add_entry(self) -> int:
        wallet = self.ctx.wallet
        entry = Entry()
        entry.generate_id()
        entry.name = self.prompt("Enter the name: ")
        entry.group = self.prompt("Enter the group: ")
        entry.uri = self.prompt("Enter the URI: ")
        entry.user = self.prompt("Enter the username: ")
        entry.password = self._new_password()
        entry.otp = self.prompt("Enter the OTP key: ", show=False)
        entry.comment = self.prompt("Enter a comment: ")

        wallet.add_entry(entry)
        wallet.save()
        print("the entry has been added")
        return 0

    def update_entry(self) -> int:
        wallet = self.ctx.wallet
        entry = self.select_entry()
        if entry is None:
            return 1
        entry.name = self.prompt("Enter the new name: ", entry.name)
        entry.group = self.prompt("Enter the new group: ", entry.group)
        entry.uri = self.prompt("Enter the new URI: ", entry.uri)
        entry.user = self.prompt("Enter the new username: ", entry.user)
        entry.password = self._new_password(entry.password)
        entry.otp = self.prompt("Enter the new OTP key: ", entry.otp, show=False)
        entry.comment = self.prompt("Enter a new comment: ", entry.comment)

        wallet.update_entry(entry)
        wallet.save()
        print("the entry has been updated")
        return 0

    def delete_entry(self) -> int:
        wallet = self.ctx.wallet
        entry = self.select_entry()
        if entry is None:
            return 1
        confirm = self.prompt("are you sure you want to remove this entry [y/N] ? ", "N")
        if confirm.lower() != "y":
            return 0
        wallet.delete_entry(entry.id)
        wallet.save()
        print("the entry has been deleted")
        return 0

    def copy_entry(self) -> int:
        """Hand login, password or OTP code to the clipboard until 'q' or timeout."""
        entry = self.select_entry()
        if entry is None:
            return 1

        clipboard = self.ctx.clipboard
        deadline = time.monotonic() + self.ctx.config.clipboard_timeout
        while True:
            choice = race_input(
                lambda: self.prompt("select one action: "),
                deadline - time.monotonic(),
                on_expire=clipboard.clear,
            )
            if choice == "l":
                clipboard.copy(entry.user)
            elif choice == "p":
                clipboard.copy(entry.password)
            elif choice == "o":
                try:
                    code, remaining = entry.otp_code()
                except OTPNotConfiguredError:
                    print("this entry has no OTP key")
                    continue
                print(f"this OTP code is available for {remaining} seconds")
                clipboard.copy(code)
            elif choice == "q":
                clipboard.clear()
                return 0
            else:
                print("l -> copy login")
                print("p -> copy password")
                print("o -> copy OTP code")
                print("q -> quit")

    def import_wallet(self, path: str | Path) -> int:
        wallet = self.ctx.wallet
        try:
            data = Path(path).expanduser().read_bytes()
        except OSError as err:
            raise StorageUnavailableError(f"cannot read {path}: {err}") from err

        added = wallet.import_entries(data)
        wallet.save()
        print(f"the import was successful ({added} entries added)")
        return 0

    def export_wallet(self, path: str | Path) -> int:
        data = self.ctx.wallet.export_entries()
        try:
            fd = os.open(Path(path).expanduser(), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as err:
            raise StorageUnavailableError(f"cannot write {path}: {err}") from err
        print("the export was successful")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keybox", description="KeyBox password manager")
    parser.add_argument("--config", default=None, help="path of the configuration file")
    parser.add_argument("--wallet", default=None, help="wallet to use instead of the default one")
    parser.add_argument("-p", "--pattern", default="", help="filter entries by name, URI, user or comment")
    parser.add_argument("-g", "--group", default="", help="filter entries by group")
    parser.add_argument("--random", action="store_true", help="generate a random password on add/update")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="list entries")
    sub.add_parser("groups", help="list groups")
    sub.add_parser("add", help="add an entry")
    sub.add_parser("update", help="update an entry")
    sub.add_parser("delete", help="delete an entry")
    sub.add_parser("copy", help="copy login, password or OTP code of an entry")
    imp = sub.add_parser("import", help="import entries from a JSON file")
    imp.add_argument("file")
    exp = sub.add_parser("export", help="export entries to a JSON file")
    exp.add_argument("file")
    gen = sub.add_parser("generate", help="print a random password")
    gen.add_argument("--length", type=int, default=None)
    return parser


def _generate(config: Config, length: Optional[int]) -> int:
    policy = PasswordPolicy.from_config(config)
    if length is not None:
        policy.length = length
    print(policy.generate())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    ctx = None
    try:
        config = Config.load(args.config)
        if args.command == "generate":
            return _generate(config, args.length)

        ctx = build_context(wallet_name=args.wallet, config=config)
        if ctx.first_run:
            print(f"wallet {ctx.wallet_name!r} does not exist yet, it is created on the first change")
        console = Console(ctx, pattern=args.pattern, group=args.group, random_password=args.random)
        commands = {
            "list": console.list_entries,
            "groups": console.list_groups,
            "add": console.add_entry,
            "update": console.update_entry,
            "delete": console.delete_entry,
            "copy": console.copy_entry,
            "import": lambda: console.import_wallet(args.file),
            "export": lambda: console.export_wallet(args.file),
        }
        return commands[args.command]()
    except InputTimeoutError as err:
        print(f"\n{err}")
        return 1
    except KeyBoxError as err:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"ERROR: {err}")
        return 2
    finally:
        if ctx is not None:
            ctx.close()


if __name__ == "__main__":
    sys.exit(main())
