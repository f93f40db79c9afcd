import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")
STORAGE_DIR = os.getenv("STORAGE_DIR", "instance/data")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ops_portal"),
}

FINANCE_UNLOCK_MINUTES = int(os.getenv("FINANCE_UNLOCK_MINUTES", "15"))
DEFAULT_FINANCE_KEY = os.getenv("DEFAULT_FINANCE_KEY", "9021")

DEBUG = False

AUTO_SEED = bool(int(os.getenv("AUTO_SEED", "0")))

LOG_FILE = os.getenv("LOG_FILE") or None
