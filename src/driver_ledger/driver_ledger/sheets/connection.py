from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

DEFAULT_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)


@dataclass
class SheetsConfig:
    spreadsheet_id: str
    credentials_file: Optional[str] = None
    credentials_b64: Optional[str] = None
    scopes: tuple[str, ...] = field(default=DEFAULT_SCOPES)


class SheetsConnection:
    """Singleton-like Sheets API client factory.

    Note: The discovery client is built lazily once and reused; it holds no
    per-request state.
    """

    _instance: Optional["SheetsConnection"] = None

    def __init__(self, config: SheetsConfig):
        self._config = config
        self._service: Any = None

    @classmethod
    def get_instance(cls, config: SheetsConfig) -> "SheetsConnection":
        if cls._instance is None:
            cls._instance = SheetsConnection(config)
        return cls._instance

    @property
    def spreadsheet_id(self) -> str:
        return self._config.spreadsheet_id

    def _credentials(self):
        scopes = list(self._config.scopes)
        if self._config.credentials_b64:
            info = json.loads(base64.b64decode(self._config.credentials_b64).decode("utf-8"))
            return service_account.Credentials.from_service_account_info(info, scopes=scopes)
        if self._config.credentials_file:
            return service_account.Credentials.from_service_account_file(self._config.credentials_file, scopes=scopes)
        raise RuntimeError("No Google service account credentials configured")

    def service(self):
        if self._service is None:
            self._service = build("sheets", "v4", credentials=self._credentials(), cache_discovery=False)
        return self._service
