SECRET_KEY = "test-secret"

SHEETS_CONFIG = {
    "spreadsheet_id": "",
    "credentials_file": "",
    "credentials_b64": "",
    "scopes": ["https://www.googleapis.com/auth/spreadsheets"],
}

STORE_BACKEND = "memory"

LANGUAGE = "en"
NAME_MATCH_POLICY = "exact"

AUTO_PROVISION_SEGMENTS = True

NOTIFICATION_ENV = "test"
NOTIFICATION_DEDUP_TTL_SECONDS = 30.0
NOTIFICATION_DEDUP_MAX_ENTRIES = 1024

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
