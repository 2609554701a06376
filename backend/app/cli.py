"""Management CLI for bootstrapping users and inspecting roles.

Usage:
    python -m app.cli create-user EMAIL PASSWORD ROLE [DEALER_CODE]
    python -m app.cli list-roles
"""

import sys

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from app.auth.password import hash_password
from app.auth.roles import (
    ROLE_HIERARCHY,
    UserRole,
    is_admin,
    parse_role,
    role_label,
)
from app.config import settings
from app.models import Dealer, User, UserStatus


def list_roles():
    for value, level in sorted(ROLE_HIERARCHY.items(), key=lambda kv: kv[1], reverse=True):
        scope = "platform" if is_admin(value) else "dealer"
        print(f"  {level}  {value:<14} {role_label(value):<14} ({scope})")


def create_user(email: str, password: str, role_name: str, dealer_code: str | None = None) -> int:
    role = parse_role(role_name)
    if role is None:
        print(f"Unknown role: {role_name!r}. Choose from: {', '.join(r.value for r in UserRole)}")
        return 1
    if not is_admin(role) and not dealer_code:
        print(f"Role {role.value} requires a DEALER_CODE")
        return 1

    engine = create_engine(settings.database_url_sync)
    with Session(engine) as session:
        dealer_id = None
        if not is_admin(role):
            dealer = session.execute(
                select(Dealer).where(Dealer.code == dealer_code.upper())
            ).scalar_one_or_none()
            if dealer is None:
                print(f"Dealer not found: {dealer_code}")
                return 1
            dealer_id = dealer.id

        if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
            print(f"User already exists: {email}")
            return 1

        local_part = email.split("@", 1)[0]
        session.add(User(
            email=email,
            hashed_password=hash_password(password),
            first_name=local_part,
            last_name="",
            role=role,
            status=UserStatus.ACTIVE,
            dealer_id=dealer_id,
        ))
        session.commit()

    print(f"  Created {role.value} {email}")
    return 0


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "list-roles":
        list_roles()
    elif cmd == "create-user" and len(sys.argv) in (5, 6):
        sys.exit(create_user(*sys.argv[2:]))
    else:
        print("Usage: python -m app.cli [create-user EMAIL PASSWORD ROLE [DEALER_CODE]|list-roles]")
