"""Backup the database before a year closure.

Also used by `scripts/close_year.py --backup`.

Note: requires `mysqldump` on PATH. Otherwise back up with MySQL Workbench
or phpMyAdmin.
"""

from __future__ import annotations

import importlib
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

BACKUP_DIR = REPO_ROOT / "backups"


def mysqldump_command(db: dict) -> list[str]:
    return [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        "--single-transaction",
        db["database"],
    ]


def backup_database(db: dict, out_dir: Path = BACKUP_DIR, *, label: str = "") -> Path:
    """Dump `db` into `out_dir` and return the file written.

    Raises FileNotFoundError when `mysqldump` is missing and
    subprocess.CalledProcessError when the dump fails.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = f"_{label}" if label else ""
    out_file = out_dir / f"{db['database']}{suffix}_{ts}.sql"

    with out_file.open("wb") as f:
        subprocess.run(mysqldump_command(db), stdout=f, stderr=subprocess.PIPE, check=True)
    return out_file


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    try:
        out_file = backup_database(settings.DB_CONFIG)
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools or back up with Workbench.")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
