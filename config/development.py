import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

SHEETS_CONFIG = {
    "spreadsheet_id": os.getenv("GOOGLE_SHEET_ID", ""),
    "credentials_file": os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),
    "credentials_b64": os.getenv("GOOGLE_SERVICE_ACCOUNT_KEY_BASE64", ""),
    "scopes": ["https://www.googleapis.com/auth/spreadsheets"],
}

# "memory" keeps everything in-process; handy without a service account
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

LANGUAGE = os.getenv("LANGUAGE", "en")
NAME_MATCH_POLICY = os.getenv("NAME_MATCH_POLICY", "exact")

# Create "<Month> <Year> Attendance" on first write when it is missing
AUTO_PROVISION_SEGMENTS = bool(int(os.getenv("AUTO_PROVISION_SEGMENTS", "1")))

NOTIFICATION_ENV = os.getenv("NOTIFICATION_ENV", "dev")
NOTIFICATION_DEDUP_TTL_SECONDS = float(os.getenv("NOTIFICATION_DEDUP_TTL_SECONDS", "30"))
NOTIFICATION_DEDUP_MAX_ENTRIES = int(os.getenv("NOTIFICATION_DEDUP_MAX_ENTRIES", "1024"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
