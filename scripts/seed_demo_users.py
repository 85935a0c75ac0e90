"""Load demo users and a starter rule set into the MongoDB store."""
from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.mongo_adapter import MongoAdapter  # noqa: E402
from cohort_handler import CohortAutoHandler  # noqa: E402

DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    load_dotenv(DOTENV_PATH)

MONGO_URI = os.getenv("COHORTAUTO_MONGO_URI")
DB_NAME = os.getenv("COHORTAUTO_MONGO_DB", "cohortauto")

if not MONGO_URI:
    raise SystemExit("COHORTAUTO_MONGO_URI is not defined; update .env before running.")

DEMO_USERS = [
    {
        "id": "u_alex",
        "username": "alex.rivera",
        "firstname": "Alex",
        "lastname": "Rivera",
        "email": "alex.rivera@ops.demo.local",
        "department": "Permian Operations",
        "city": "Midland",
        "country": "US",
        "profile": {"role": "Production Engineer", "tags": "Operations;Responder"},
    },
    {
        "id": "u_casey",
        "username": "casey.lee",
        "firstname": "Casey",
        "lastname": "Lee",
        "email": "casey.lee@demo.local",
        "department": "Corporate IT",
        "city": "Houston",
        "country": "US",
        "profile": {"role": "IT Systems Lead", "tags": "Corporate;Leadership;IT"},
    },
    {
        "id": "u_maria",
        "username": "maria.gonzales",
        "firstname": "Maria",
        "lastname": "Gonzales",
        "email": "maria.gonzales@hse.demo.local",
        "department": "HSE",
        "city": "Houston",
        "country": "US",
        "profile": {"role": "HSE Director", "tags": "HSE;Leadership"},
    },
    {
        "id": "u_temp",
        "username": "sam.contractor",
        "firstname": "Sam",
        "lastname": "Contractor",
        "email": "sam.contractor@demo.local",
        "department": "East Projects",
        "city": "",
        "country": "US",
        "profile": {"role": "Project Engineer", "tags": "Contractor"},
    },
    {
        "id": "u_guest",
        "username": "guest",
        "firstname": "Guest",
        "lastname": "User",
        "email": "root@localhost",
    },
]

DEMO_RULES = {
    "mainrule_fld": "\r\n".join(
        [
            "dept-{{ department }}",
            "{{ city }} ({{ country }})",
            "domain-{{ email.rootdomain }}",
            "tag-%split(profile_field_tags|;)",
        ]
    ),
    "secondrule_fld": "n/a",
    "replace_arr": " (US)| - United States",
    "delim": "CR+LF",
    "donttouchusers": "admin",
    "enableunenrol": True,
}


def main() -> None:
    adapter = MongoAdapter(MONGO_URI, db_name=DB_NAME)
    for user in DEMO_USERS:
        adapter.upsert_user(user)
        print(f"[OK] Upserted {user['id']}.")
    CohortAutoHandler(adapter).process_config(DEMO_RULES)
    adapter.close()
    print("Demo data seeded.")


if __name__ == "__main__":
    main()
