"""Re-run cohort assignment for one user or for every user in the store."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from cohort_handler import CohortAutoHandler, configure_logging, get_store, load_settings  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Sync cohort memberships from profile rules.")
    parser.add_argument("--user", help="User id to sync. Syncs every user when omitted.")
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings)
    store = get_store(settings)
    handler = CohortAutoHandler(store)

    if not handler.config.mainrule_fld:
        print("[WARN] No cohort rules are configured; nothing to do.")
        return

    if args.user:
        user = store.get_user(args.user)
        if user is None:
            raise SystemExit(f"No user with id={args.user} was found.")
        results = {args.user: handler.user_profile_hook(user)}
    else:
        results = handler.sync_all_users()

    for user_id, cohort_ids in results.items():
        print(f"[OK] {user_id}: {len(cohort_ids)} cohort(s)")

    close = getattr(store, "close", None)
    if callable(close):
        close()
    print("Done.")


if __name__ == "__main__":
    main()
