from __future__ import annotations

import subprocess

import pytest

from scripts import backup

DB = {"host": "localhost", "port": 3306, "user": "root", "password": "secret", "database": "school_db"}


def test_backup_writes_dump_named_after_database(monkeypatch, tmp_path):
    calls = []

    def fake_run(cmd, stdout, stderr, check):
        calls.append(cmd)
        stdout.write(b"-- dump\n")

    monkeypatch.setattr(backup.subprocess, "run", fake_run)

    out_file = backup.backup_database(DB, tmp_path, label="before_close_2024")

    assert out_file.parent == tmp_path
    assert out_file.name.startswith("school_db_before_close_2024_")
    assert out_file.read_bytes() == b"-- dump\n"
    assert calls == [backup.mysqldump_command(DB)]
    assert calls[0][0] == "mysqldump"
    assert calls[0][-1] == "school_db"


def test_backup_propagates_dump_failure(monkeypatch, tmp_path):
    def failing_run(cmd, stdout, stderr, check):
        raise subprocess.CalledProcessError(2, cmd, stderr=b"access denied")

    monkeypatch.setattr(backup.subprocess, "run", failing_run)

    with pytest.raises(subprocess.CalledProcessError):
        backup.backup_database(DB, tmp_path)
