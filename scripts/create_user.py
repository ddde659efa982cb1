import argparse
import getpass
import sys

from expense_tracker.core.app_factory import build_container
from expense_tracker.core.config import Settings
from expense_tracker.core.logging import configure_logging
from expense_tracker.domain.errors import ExpenseTrackerError


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an ExpenseTracker account from the command line.")
    parser.add_argument("--email", help="Account email (prompted when omitted)")
    parser.add_argument("--name", help="Display name (prompted when omitted)")
    parser.add_argument("--verified", action="store_true", help="Mark the email address as already verified")
    args = parser.parse_args()

    configure_logging()
    settings = Settings()
    container = build_container(settings)

    email = args.email or input("Email: ").strip()
    name = args.name or input("Name: ").strip()
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("Passwords do not match.", file=sys.stderr)
        return 1

    try:
        result = container.auth_service.register(name, email, password)
        user = result.user
        if args.verified:
            user = container.persistence.update(user.id, is_email_verified=True)
    except ExpenseTrackerError as exc:
        print(f"{exc.kind}: {exc.message}", file=sys.stderr)
        for error in exc.errors:
            print(f"  {error['field']}: {error['message']}", file=sys.stderr)
        return 1
    finally:
        container.persistence.close()

    print(f"Created user {user.id} ({user.email}) in {settings.database_path}")
    print(f"Access token: {result.tokens.access_token}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
