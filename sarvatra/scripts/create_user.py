"""
Create an account from the command line (e.g. the first admin). Run from project root:
  python -m sarvatra.scripts.create_user USERNAME PASSWORD [role] [--status STATUS]
Example:
  python -m sarvatra.scripts.create_user admin 'S3cure!Passw0rd' admin
"""
import argparse
import logging
import sys

from sarvatra.core.config import get_settings
from sarvatra.core.errors import UsernameTakenError
from sarvatra.schemas.auth import AdminCreateUserRequest
from sarvatra.schemas.validation import Invalid, validate
from sarvatra.services.accounts import create_account_by_admin
from sarvatra.stores import SqlStore, build_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Sarvatra account (bypasses approval).")
    parser.add_argument("username", help="Username (3-255 chars)")
    parser.add_argument(
        "password",
        help="Password (8+ chars with an uppercase letter, a number and a special character)",
    )
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument(
        "--status",
        choices=["pending", "approved", "rejected"],
        default="approved",
        help="Initial status for user accounts (default: approved; admins are always approved)",
    )
    args = parser.parse_args(argv)

    result = validate(
        AdminCreateUserRequest,
        {
            "username": args.username,
            "password": args.password,
            "role": args.role,
            "status": args.status,
        },
    )
    if isinstance(result, Invalid):
        for error in result.errors:
            print(f"{error.field}: {error.message}", file=sys.stderr)
        return 1

    settings = get_settings()
    if settings.STORE_BACKEND == "memory":
        print("STORE_BACKEND=memory: the account would be lost on exit.", file=sys.stderr)
        return 1
    store = build_store(settings)
    if isinstance(store, SqlStore) and settings.DATABASE_URL.startswith("sqlite"):
        store.create_schema()

    try:
        account = create_account_by_admin(store, result.value, settings)
    except UsernameTakenError:
        logger.warning("Username already taken", extra={"username": result.value.username})
        print(f"User '{result.value.username}' already exists.", file=sys.stderr)
        return 1
    logger.info(
        "Account created from command line",
        extra={"account_id": account.id, "role": account.role, "account_status": account.status},
    )
    print(
        f"Created user '{account.username}' with role '{account.role}' "
        f"and status '{account.status}'."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
