from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from hr_records.database.bootstrap import DEMO_PASSWORD, apply_seed_sql, demo_user_rows, ensure_demo_users


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)

    print(f"OK: seeded {db_config.get('database')} on {db_config.get('host')}")
    for name, email, role in demo_user_rows():
        print(f"  {role.value:<10} {email:<28} password={DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
