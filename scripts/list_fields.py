import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cohort_handler import CohortAutoHandler, get_store, load_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Show the template fields available for a user.")
    parser.add_argument("user", help="User id to inspect.")
    args = parser.parse_args()

    store = get_store(load_settings())
    user = store.get_user(args.user)
    if user is None:
        raise SystemExit(f"No user with id={args.user} was found.")

    handler = CohortAutoHandler(store)
    for field, value in handler.profile_fields(user):
        print(f"{{{{ {field} }}}}: {value}")


if __name__ == "__main__":
    main()
