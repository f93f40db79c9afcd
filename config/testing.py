import os

SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"
STORAGE_DIR = os.getenv("STORAGE_DIR", "instance/test-data")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ops_portal_test"),
}

FINANCE_UNLOCK_MINUTES = 15
DEFAULT_FINANCE_KEY = "9021"

DEBUG = False
TESTING = True

AUTO_SEED = False

LOG_FILE = None
