import os

SECRET_KEY = "test-secret"

STORE_BACKEND = "file"
STORE_PATH = os.getenv("STORE_PATH", ".pytest_store")
STORE_KEY = "event_checkin_test"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_checkin_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
