"""
Create a user (the only way to create an admin). Run from project root:
  python -m taskflow.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m taskflow.scripts.create_user "Site Admin" admin@example.com your-secure-password admin
"""

import argparse
import sys

from sqlalchemy.orm import Session

from taskflow.database import SessionLocal
from taskflow.exceptions import DuplicateEmail
from taskflow.models.user import ROLE_USER, ROLES
from taskflow.services.passwords import hash_password
from taskflow.services.user_store import get_user_store


def create_user(db: Session, name: str, email: str, password: str, role: str = ROLE_USER) -> int:
    """Create a user with the given role and return its id. Raises DuplicateEmail."""
    store = get_user_store()
    if store.email_taken(db, email):
        raise DuplicateEmail()
    user = store.create(db, name=name, email=email, password_hash=hash_password(password))
    if role != ROLE_USER:
        store.set_role(db, user.id, role)
    return user.id


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a TaskFlow user.")
    parser.add_argument("name", help="Display name (2-50 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=list(ROLES))
    args = parser.parse_args()

    name = args.name.strip()
    if not 2 <= len(name) <= 50:
        print("Name must be 2-50 characters.", file=sys.stderr)
        return 1
    if "@" not in args.email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not 6 <= len(args.password) <= 128:
        print("Password must be 6-128 characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user_id = create_user(db, name, args.email, args.password, args.role)
    except DuplicateEmail:
        print(f"User '{args.email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user {user_id} '{args.email}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
