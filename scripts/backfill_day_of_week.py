"""Fill empty "Day of Week" cells of a segment.

Usage: python scripts/backfill_day_of_week.py ["August 2025 Attendance"]

Defaults to the most recent segment.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.driver_ledger.driver_ledger.container import build_container_from_settings
from src.driver_ledger.driver_ledger.logging_config import configure_logging


def main(argv: list[str]) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container_from_settings(settings)

    segment = argv[0] if argv else container.provisioner.latest()
    if not segment:
        raise SystemExit("No attendance segments found")

    result = container.ledger_service.backfill_day_of_week(segment_id=segment)
    if not result.success:
        raise SystemExit(f"FAILED: {result.message}")
    print(f"OK: {segment}: {result.message}")


if __name__ == "__main__":
    main(sys.argv[1:])
