"""Advance classroom schedule statuses whose start or end time has passed.

Meant to run periodically (cron/systemd timer):

    python scripts/update_schedule_status.py --batch-size 200
    python scripts/update_schedule_status.py --dry-run
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from train_classroom.core.constants import DEFAULT_SWEEP_BATCH_SIZE
from train_classroom.main import create_container


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="count transitions without writing them")
    parser.add_argument("--batch-size", type=int, default=None, help="max schedules loaded per status")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    container = create_container()

    batch_size = args.batch_size
    if batch_size is None:
        settings = importlib.import_module(get_settings_module())
        batch_size = int(getattr(settings, "STATUS_SWEEP_BATCH_SIZE", DEFAULT_SWEEP_BATCH_SIZE))

    report = container.schedule_service.advance_statuses(batch_size=batch_size, dry_run=args.dry_run)
    print(f"OK: {report.total_processed} schedule(s) advanced" + (" (dry run)" if report.dry_run else ""))
    return 0


if __name__ == "__main__":
    sys.exit(main())
