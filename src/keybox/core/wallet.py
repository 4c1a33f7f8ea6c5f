"""
Wallet: the ordered collection of entries stored in one vault file

Structure Map for reference:
==============================
 - <wallet_dir>/
      - config.json
      - {wallet_name}.gpm   (base64 of nonce || AES-256-GCM(JSON entries))
==============================
For reference:
> The vault is decrypted as a whole on load and re-encrypted as a whole on save
> The key salt is the wallet name, so two wallets sharing a passphrase still use different keys
> Entries keep their insertion order through save/load, import appends at the end
> Export/import use the same JSON records as the vault payload, in clear text

"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from .exceptions import (
    DuplicateEntryError,
    EntryNotFoundError,
    MalformedImportError,
    MalformedVaultError,
    StorageUnavailableError,
)
from .models import Entry, create_entry_from_dict
from ..security.encryption import decrypt, encrypt

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "uri", "user", "comment")


def _parse_records(data: bytes | str, require_id: bool) -> List[Entry]:
    # Shared by load and import; raises ValueError on any structural problem,
    # RecursionError on pathologically nested JSON
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    records = json.loads(data)
    if not isinstance(records, list):
        raise ValueError(f"expected a JSON array of entries, got {type(records).__name__}")
    return [create_entry_from_dict(record, require_id=require_id) for record in records]


class Wallet:
    """Entries of one vault, with encrypted load/save and JSON import/export"""

    def __init__(
        self,
        name: str,
        path: str | Path,
        passphrase: str,
        salt: Optional[str] = None,
    ):
        self.name = name
        self.path = Path(path).expanduser()
        self.passphrase = passphrase
        self.salt = salt if salt is not None else name
        self.entries: List[Entry] = []

    def __repr__(self) -> str:
        return f"Wallet(name={self.name!r}, path={str(self.path)!r}, entries={len(self.entries)})"

    def __len__(self) -> int:
        return len(self.entries)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> None:
        """
        Decrypt the vault file and replace ``entries`` with its content.

        Raises:
            StorageUnavailableError: the file is missing or unreadable
            AuthenticationError: wrong passphrase or corrupted vault
            MalformedVaultError: decrypted content is not a list of entries
        """
        try:
            envelope = self.path.read_bytes()
        except OSError as err:
            raise StorageUnavailableError(f"cannot read wallet {self.name!r} at {self.path}: {err}") from err

        raw = decrypt(envelope, self.passphrase, self.salt)

        try:
            entries = _parse_records(raw, require_id=True)
        except (ValueError, RecursionError) as err:
            raise MalformedVaultError(f"wallet {self.name!r} does not contain valid entries: {err}") from err

        seen = set()
        for entry in entries:
            if entry.id in seen:
                raise MalformedVaultError(f"wallet {self.name!r} contains duplicate id {entry.id}")
            seen.add(entry.id)

        self.entries = entries
        logger.info("loaded wallet %s (%d entries)", self.name, len(entries))

    def save(self) -> None:
        """
        Encrypt ``entries`` and atomically replace the vault file.

        The new content is written to a 0600 temp file next to the vault,
        synced, then renamed over it, so the file on disk is always either the
        old or the new vault.
        """
        raw = json.dumps([entry.to_dict() for entry in self.entries], ensure_ascii=False).encode("utf-8")
        envelope = encrypt(raw, self.passphrase, self.salt)

        tmp_path = None
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="ascii") as f:
                f.write(envelope)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates the file 0600
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as err:
            raise StorageUnavailableError(f"cannot write wallet {self.name!r} to {self.path}: {err}") from err
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning("could not remove temporary file %s", tmp_path)

        logger.info("saved wallet %s (%d entries)", self.name, len(self.entries))

    def close(self) -> None:
        """Drop the passphrase and decrypted entries from this object."""
        self.passphrase = ""
        self.entries = []

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def search(self, pattern: str = "", group: str = "") -> List[Entry]:
        """
        Return copies of the entries matching ``group`` and ``pattern``.

        ``group`` must match exactly; ``pattern`` is a case-insensitive
        substring of name, uri, user or comment. Empty filters match
        everything. Order is the wallet order.
        """
        needle = pattern.casefold()
        found = []
        for entry in self.entries:
            if group and entry.group != group:
                continue
            if needle and not any(needle in getattr(entry, field).casefold() for field in SEARCH_FIELDS):
                continue
            found.append(entry.copy())
        return found

    def get_entry(self, entry_id: str) -> Entry:
        return self.entries[self._index_of(entry_id)].copy()

    def groups(self) -> List[str]:
        """Distinct non-empty groups, in the order they first appear."""
        seen = []
        for entry in self.entries:
            if entry.group and entry.group not in seen:
                seen.append(entry.group)
        return seen

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _index_of(self, entry_id: str) -> int:
        for i, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return i
        raise EntryNotFoundError(f"no entry with id {entry_id!r} in wallet {self.name!r}")

    def _has_id(self, entry_id: str) -> bool:
        return any(entry.id == entry_id for entry in self.entries)

    def add_entry(self, entry: Entry) -> None:
        """Append ``entry``; its id must already be generated."""
        entry.validate()
        if self._has_id(entry.id):
            raise DuplicateEntryError(f"an entry with id {entry.id!r} already exists")
        self.entries.append(entry.copy())
        logger.debug("added entry %s", entry.id)

    def update_entry(self, entry: Entry) -> None:
        """Replace the entry with the same id, keeping its position."""
        entry.validate()
        index = self._index_of(entry.id)
        self.entries[index] = entry.copy()
        logger.debug("updated entry %s", entry.id)

    def delete_entry(self, entry_id: str) -> None:
        index = self._index_of(entry_id)
        del self.entries[index]
        logger.debug("deleted entry %s", entry_id)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_entries(self, data: bytes | str) -> int:
        """
        Merge entries from a JSON export, returning how many were added.

        Records without an id get a fresh one. Records whose id is already in
        the wallet are skipped, never overwritten. The whole document is
        checked before anything is merged.
        """
        try:
            incoming = _parse_records(data, require_id=False)
        except (ValueError, RecursionError) as err:
            raise MalformedImportError(f"import data is not a valid list of entries: {err}") from err

        known = {entry.id for entry in self.entries}
        added = 0
        for entry in incoming:
            if not entry.id:
                entry.generate_id()
            if entry.id in known:
                logger.debug("skipping imported entry %s, id already present", entry.id)
                continue
            known.add(entry.id)
            self.entries.append(entry)
            added += 1

        logger.info("imported %d of %d entries into wallet %s", added, len(incoming), self.name)
        return added

    def export_entries(self) -> bytes:
        """Return every entry as a clear-text JSON array, secrets included."""
        return json.dumps([entry.to_dict() for entry in self.entries], ensure_ascii=False, indent=2).encode("utf-8")
