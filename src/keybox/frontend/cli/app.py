"""Textual app for browsing a KeyBox wallet.

Start here with `python -m keybox.frontend.cli.app` (or `keybox-tui`).
"""

from __future__ import annotations

import sys
from typing import Optional

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Static,
)

from keybox.core.exceptions import KeyBoxError
from keybox.core.models import Entry
from keybox.frontend.cli.context import AppContext, build_context
from keybox.frontend.cli.logging_config import configure_logging
from keybox.security.password import PasswordPolicy


# === Modal definitions ===


class EntryFormResult:
    def __init__(self, fields: dict[str, str]):
        self.fields = fields


class EntryFormModal(ModalScreen[Optional[EntryFormResult]]):
    """Add or edit an entry; the password can be generated from the policy."""

    FIELDS = (
        ("name", "Name", False),
        ("group", "Group", False),
        ("uri", "URI", False),
        ("user", "Username", False),
        ("password", "Password", True),
        ("otp", "OTP key (base32)", True),
        ("comment", "Comment", False),
    )

    def __init__(self, policy: PasswordPolicy, entry: Entry | None = None):
        super().__init__()
        self.policy = policy
        self.entry = entry
        self.inputs: dict[str, Input] = {}

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        title = "Edit Entry" if self.entry else "New Entry"
        with Vertical(classes="dialog"):
            yield Static(title, classes="title")
            for field, label, secret in self.FIELDS:
                yield Label(label)
                value = getattr(self.entry, field) if self.entry else ""
                self.inputs[field] = Input(value=value, password=secret, id=f"field-{field}")
                yield self.inputs[field]
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Generate password", id="generate")
                yield Button("Save", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.inputs["name"])

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover - UI only
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "generate":
            self.inputs["password"].value = self.policy.generate()
        else:
            self.dismiss(EntryFormResult({f: i.value for f, i in self.inputs.items()}))

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class DeleteConfirmModal(ModalScreen[Optional[bool]]):
    def __init__(self, prompt: str):
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:  # pragma: no cover
        with Vertical(classes="dialog"):
            yield Static(self.prompt, classes="title")
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Delete", id="ok", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        self.dismiss(event.button.id == "ok")

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(False)


class KeyBoxApp(App):
    """Entries table with search, group filter and clipboard shortcuts."""

    TITLE = "KeyBox"

    CSS = """
    #filters { height: 3; }
    #search { width: 2fr; }
    #group { width: 1fr; }
    #status { padding: 0 1 1 1; height: 3; color: $text-muted; }
    ModalScreen { align: center middle; background: rgba(0,0,0,0.45); }
    .dialog { width: 75%; height: 90%; padding: 1; border: heavy $surface; background: $boost; }
    .title { padding: 1 1; text-style: bold; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("l", "copy_login", "Copy login"),
        ("p", "copy_password", "Copy password"),
        ("o", "copy_otp", "Copy OTP"),
        ("a", "add_entry", "Add"),
        ("e", "edit_entry", "Edit"),
        ("d", "delete_entry", "Delete"),
        ("/", "focus_search", "Search"),
    ]

    def __init__(self, ctx: AppContext):
        self.ctx = ctx
        super().__init__()
        self.table: DataTable | None = None
        self.status: Static | None = None
        self.search_input: Input | None = None
        self.group_input: Input | None = None
        self.row_keys: list[str] = []
        self._clear_timer: Timer | None = None
        self.status_text = ""

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical():
            with Horizontal(id="filters"):
                self.search_input = Input(placeholder="search name, URI, user, comment", id="search")
                yield self.search_input
                self.group_input = Input(placeholder="group", id="group")
                yield self.group_input
            self.table = DataTable(id="entries", cursor_type="row")
            yield self.table
            self.status = Static("", id="status")
            yield self.status
        yield Footer()

    def on_mount(self) -> None:
        assert self.table is not None
        self.sub_title = self.ctx.wallet_name
        self.table.add_columns("Group", "Name", "URI", "User", "OTP", "Comment")
        self.refresh_entries()
        self.table.focus()
        if self.ctx.first_run:
            self._set_status(f"new wallet {self.ctx.wallet_name}, it is written on the first save")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_status(self, text: str) -> None:
        self.status_text = text
        if self.status is not None:
            self.status.update(text)

    def refresh_entries(self) -> None:
        assert self.table is not None
        assert self.search_input is not None and self.group_input is not None
        entries = self.ctx.wallet.search(self.search_input.value, self.group_input.value)

        self.table.clear()
        self.row_keys = []
        for entry in entries:
            otp = "X" if entry.has_otp() else ""
            self.table.add_row(entry.group, entry.name, entry.uri, entry.user, otp, entry.comment, key=entry.id)
            self.row_keys.append(entry.id)
        self._set_status(f"{len(entries)} of {len(self.ctx.wallet)} entries")

    def selected_entry(self) -> Optional[Entry]:
        if self.table is None or not self.row_keys:
            return None
        row = self.table.cursor_row
        if row < 0 or row >= len(self.row_keys):
            return None
        return self.ctx.wallet.get_entry(self.row_keys[row])

    def _copy_secret(self, value: str, label: str) -> None:
        self.ctx.clipboard.copy(value)
        if self._clear_timer is not None:
            self._clear_timer.stop()
        timeout = self.ctx.config.clipboard_timeout
        self._clear_timer = self.set_timer(timeout, self.expire_clipboard)
        self._set_status(f"{label} copied, clipboard is cleared in {timeout} seconds")

    def expire_clipboard(self) -> None:
        self._clear_timer = None
        self.ctx.clipboard.clear()
        self._set_status("clipboard cleared")

    def _save(self) -> bool:
        try:
            self.ctx.wallet.save()
        except KeyBoxError as err:
            self._set_status(f"ERROR: {err}")
            return False
        return True

    # ------------------------------------------------------------------
    # Events and actions
    # ------------------------------------------------------------------

    @on(Input.Changed)
    def on_filter_changed(self, event: Input.Changed) -> None:
        if event.input.id in ("search", "group"):
            self.refresh_entries()

    def action_focus_search(self) -> None:
        if self.search_input is not None:
            self.search_input.focus()

    def action_copy_login(self) -> None:
        entry = self.selected_entry()
        if entry is not None:
            self._copy_secret(entry.user, "login")

    def action_copy_password(self) -> None:
        entry = self.selected_entry()
        if entry is not None:
            self._copy_secret(entry.password, "password")

    def action_copy_otp(self) -> None:
        entry = self.selected_entry()
        if entry is None:
            return
        try:
            code, remaining = entry.otp_code()
        except KeyBoxError as err:
            self._set_status(f"ERROR: {err}")
            return
        self._copy_secret(code, f"OTP code (valid {remaining}s)")

    def action_add_entry(self) -> None:
        self.push_screen(EntryFormModal(self.ctx.policy), self._handle_add)

    def _handle_add(self, result: Optional[EntryFormResult]) -> None:
        if not result:
            return
        try:
            self.ctx.wallet.add_entry(Entry.create(**result.fields))
        except KeyBoxError as err:
            self._set_status(f"ERROR: {err}")
            return
        if self._save():
            self.refresh_entries()

    def action_edit_entry(self) -> None:
        entry = self.selected_entry()
        if entry is None:
            return

        def handle(result: Optional[EntryFormResult]) -> None:
            if not result:
                return
            for field, value in result.fields.items():
                setattr(entry, field, value)
            try:
                self.ctx.wallet.update_entry(entry)
            except KeyBoxError as err:
                self._set_status(f"ERROR: {err}")
                return
            if self._save():
                self.refresh_entries()

        self.push_screen(EntryFormModal(self.ctx.policy, entry), handle)

    def action_delete_entry(self) -> None:
        entry = self.selected_entry()
        if entry is None:
            return

        def handle(confirmed: Optional[bool]) -> None:
            if not confirmed:
                return
            self.ctx.wallet.delete_entry(entry.id)
            if self._save():
                self.refresh_entries()

        self.push_screen(DeleteConfirmModal(f"Delete entry '{entry.name}'?"), handle)

    async def action_quit(self) -> None:
        self.ctx.close()
        self.exit()


def main() -> None:
    """Unlock the default wallet on the terminal, then run the Textual app."""
    configure_logging()
    try:
        ctx = build_context()
    except KeyBoxError as err:
        print(f"ERROR: {err}")
        sys.exit(2)
    try:
        KeyBoxApp(ctx).run()
    finally:
        ctx.close()


if __name__ == "__main__":
    main()
