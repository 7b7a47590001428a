import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

SHEETS_CONFIG = {
    "spreadsheet_id": os.getenv("GOOGLE_SHEET_ID", ""),
    "credentials_file": os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),
    "credentials_b64": os.getenv("GOOGLE_SERVICE_ACCOUNT_KEY_BASE64", ""),
    "scopes": ["https://www.googleapis.com/auth/spreadsheets"],
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "google")

LANGUAGE = os.getenv("LANGUAGE", "en")
NAME_MATCH_POLICY = os.getenv("NAME_MATCH_POLICY", "exact")

AUTO_PROVISION_SEGMENTS = bool(int(os.getenv("AUTO_PROVISION_SEGMENTS", "0")))

NOTIFICATION_ENV = os.getenv("NOTIFICATION_ENV", "prod")
NOTIFICATION_DEDUP_TTL_SECONDS = float(os.getenv("NOTIFICATION_DEDUP_TTL_SECONDS", "30"))
NOTIFICATION_DEDUP_MAX_ENTRIES = int(os.getenv("NOTIFICATION_DEDUP_MAX_ENTRIES", "1024"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
