from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container_from_settings
from .ledger.controller import register as register_ledger
from .logging_config import configure_logging
from .sheets.store import SheetStore

logger = logging.getLogger("driver_ledger.main")


def create_app(*, store: Optional[SheetStore] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    sheets_config = getattr(settings, "SHEETS_CONFIG", {})
    logger.info(
        "settings=%s backend=%s spreadsheet=%s",
        settings_module,
        getattr(settings, "STORE_BACKEND", "google"),
        sheets_config.get("spreadsheet_id") or "-",
    )

    container = build_container_from_settings(settings, store=store)
    app.extensions["driver_ledger"] = container

    register_ledger(app, container)

    return app
