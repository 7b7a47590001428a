"""Create the monthly attendance segment.

Usage: python scripts/create_segment.py [MONTH YEAR] [--force]

Without MONTH/YEAR the current month is used. Year may be Buddhist era.
--force deletes an existing segment of the same name first (its rows are lost).
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
    force = "--force" in argv
    args = [a for a in argv if a != "--force"]
    if len(args) not in (0, 2):
        raise SystemExit(__doc__)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container_from_settings(settings)

    month, year = (int(args[0]), int(args[1])) if args else (None, None)
    result = container.ledger_service.create_segment(month=month, year=year, force=force)
    if not result.success:
        raise SystemExit(f"FAILED: {result.message}")
    print(f"OK: {result.data['segment']} ({result.data['schema']} layout)")


if __name__ == "__main__":
    main(sys.argv[1:])
