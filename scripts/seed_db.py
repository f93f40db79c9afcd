from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.ops_portal.ops_portal.container import build_store
from src.ops_portal.ops_portal.database.bootstrap import DEFAULT_FINANCE_KEY, seed_demo_data


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    backend = getattr(settings, "STORAGE_BACKEND", "file")
    store = build_store(
        backend=backend,
        storage_dir=getattr(settings, "STORAGE_DIR", "instance/data"),
        db_config=getattr(settings, "DB_CONFIG", None),
    )
    seeded = seed_demo_data(store, finance_key=getattr(settings, "DEFAULT_FINANCE_KEY", DEFAULT_FINANCE_KEY))

    if seeded:
        print(f"OK: Seeded {', '.join(seeded)} -> {backend}")
    else:
        print(f"OK: Nothing to seed, collections already populated -> {backend}")


if __name__ == "__main__":
    main()
