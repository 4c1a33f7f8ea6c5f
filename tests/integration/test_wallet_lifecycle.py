"""Integration tests: wallets on disk, export/import files and the console end to end."""

import json
import os
import stat

import pytest

from keybox.core.config import Config
from keybox.core.exceptions import AuthenticationError
from keybox.core.models import Entry
from keybox.core.wallet import Wallet
from keybox.frontend.cli import console

# --- Fixtures ---


@pytest.fixture
def wallet(tmp_path):
    w = Wallet("perso", tmp_path / "perso.gpm", "correct horse")
    w.add_entry(Entry(id="a1", name="GitHub", group="dev", uri="github.com", user="alice", password="pw1"))
    w.add_entry(Entry(id="b2", name="Bank", group="money", user="bob", password="pw2", otp="GEZDGNBVGY3TQOJQ"))
    w.add_entry(Entry(id="c3", name="Notes", comment="multi\nline é"))
    return w


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    Config(wallet_dir=str(tmp_path / "wallets")).save(path)
    monkeypatch.setenv("KEYBOX_PASSPHRASE", "correct horse")
    return path


# --- Storage ---


def test_save_and_load_keeps_entries_and_order(wallet, tmp_path):
    wallet.save()
    assert stat.S_IMODE(os.stat(wallet.path).st_mode) == 0o600

    reopened = Wallet("perso", tmp_path / "perso.gpm", "correct horse")
    reopened.load()
    assert [e.id for e in reopened.entries] == ["a1", "b2", "c3"]
    assert reopened.entries == wallet.entries


def test_vault_file_does_not_leak_secrets(wallet):
    wallet.save()
    content = wallet.path.read_text()
    for secret in ("GitHub", "alice", "pw1", "GEZDGNBVGY3TQOJQ"):
        assert secret not in content


def test_wallet_name_is_part_of_the_key(wallet, tmp_path):
    wallet.save()
    renamed = tmp_path / "other.gpm"
    os.replace(wallet.path, renamed)

    other = Wallet("other", renamed, "correct horse")
    with pytest.raises(AuthenticationError):
        other.load()


def test_save_leaves_no_temp_files(wallet, tmp_path):
    wallet.save()
    wallet.save()
    assert sorted(p.name for p in tmp_path.iterdir()) == ["perso.gpm"]


def test_export_import_is_idempotent(wallet, tmp_path):
    export_path = tmp_path / "export.json"
    export_path.write_bytes(wallet.export_entries())

    target = Wallet("target", tmp_path / "target.gpm", "pw")
    assert target.import_entries(export_path.read_bytes()) == 3
    assert target.import_entries(export_path.read_bytes()) == 0
    target.save()

    target = Wallet("target", tmp_path / "target.gpm", "pw")
    target.load()
    assert target.entries == wallet.entries


# --- Console end to end ---


def test_console_import_list_export(config_file, tmp_path, capsys):
    source = tmp_path / "source.json"
    source.write_text(json.dumps([
        {"name": "GitHub", "group": "dev", "user": "alice", "password": "pw1"},
        {"name": "Bank", "group": "money", "user": "bob", "password": "pw2"},
    ]))

    assert console.main(["--config", str(config_file), "import", str(source)]) == 0
    assert (tmp_path / "wallets" / "default.gpm").is_file()

    capsys.readouterr()
    assert console.main(["--config", str(config_file), "-g", "money", "list"]) == 0
    out = capsys.readouterr().out
    assert "Bank" in out
    assert "GitHub" not in out

    assert console.main(["--config", str(config_file), "groups"]) == 0
    assert capsys.readouterr().out.split() == ["dev", "money"]

    exported = tmp_path / "exported.json"
    assert console.main(["--config", str(config_file), "export", str(exported)]) == 0
    records = json.loads(exported.read_text())
    assert [r["name"] for r in records] == ["GitHub", "Bank"]
    assert all(r["id"] for r in records)


def test_console_rejects_wrong_passphrase(config_file, tmp_path, monkeypatch, capsys):
    source = tmp_path / "source.json"
    source.write_text("[]")
    assert console.main(["--config", str(config_file), "import", str(source)]) == 0

    monkeypatch.setenv("KEYBOX_PASSPHRASE", "wrong")
    assert console.main(["--config", str(config_file), "list"]) == 2
    assert "ERROR" in capsys.readouterr().out
