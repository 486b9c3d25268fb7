"""Run the year closure from the command line (no Flask).

    python scripts/close_year.py 2024 --operator admin
    python scripts/close_year.py 2024 --operator admin --dry-run
    python scripts/close_year.py 2024 --operator admin --backup

The confirmation phrase is asked interactively unless --confirm is given.
"""

from __future__ import annotations

import argparse
import importlib
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.school_system.school_system.container import build_container
from src.school_system.school_system.core.exceptions import ClosurePhaseError, DomainError
from src.school_system.school_system.logging_config import configure_logging

from scripts.backup import backup_database


def main() -> None:
    parser = argparse.ArgumentParser(description="Close a school year: archive, promote and clean up.")
    parser.add_argument("year", help="School year to close, e.g. 2024")
    parser.add_argument("--operator", required=True, help="Name recorded in the closure ledger")
    parser.add_argument("--confirm", help="Confirmation phrase (CERRAR AÑO <year>)")
    parser.add_argument("--resume", action="store_true", help="Resume an interrupted closure")
    parser.add_argument("--dry-run", action="store_true", help="Only print the statistics preview")
    parser.add_argument("--backup", action="store_true", help="Dump the database with mysqldump before closing")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(
        db_config=settings.DB_CONFIG,
        lock_ttl_minutes=int(getattr(settings, "CLOSURE_LOCK_TTL_MINUTES", 30)),
    )
    service = container.closure_service

    try:
        preview = service.preview(args.year)
    except DomainError as e:
        raise SystemExit(f"ERROR: {e}")

    for key, value in preview.statistics.to_dict().items():
        print(f"  {key:<28} {value}")
    if preview.ledger_record is not None:
        print(f"  ledger: {preview.ledger_record.status.value} by {preview.ledger_record.closed_by}")
    if args.dry_run:
        return

    confirmation = args.confirm
    if confirmation is None:
        confirmation = input(f"Escriba {preview.expected_phrase} para confirmar: ")

    if args.backup:
        try:
            out_file = backup_database(settings.DB_CONFIG, label=f"before_close_{args.year}")
        except FileNotFoundError:
            raise SystemExit("ERROR: `mysqldump` not found; run without --backup or back up with Workbench.")
        except subprocess.CalledProcessError as e:
            raise SystemExit(f"ERROR: backup failed: {e.stderr.decode(errors='replace') if e.stderr else e}")
        print(f"OK: Backup created: {out_file}")

    try:
        result = service.execute(
            year=args.year,
            confirmation=confirmation,
            operator=args.operator,
            resume=args.resume,
            listeners=[lambda ev: print(f"[{ev.progress:3d}%] {ev.phase.value} {ev.status.value}")],
        )
    except ClosurePhaseError as e:
        raise SystemExit(f"ERROR: {e}\n-> {e.corrective_action}")
    except DomainError as e:
        raise SystemExit(f"ERROR: {e}")

    print(
        f"OK: Year {result.year} closed (promoted={result.promoted}, "
        f"sessions_deleted={result.sessions_deleted}, workshops_reset={result.workshops_reset}). "
        f"Next year: {result.next_year}"
    )


if __name__ == "__main__":
    main()
