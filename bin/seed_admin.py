"""
Bootstrap script – creates the first admin user explicitly.

Registration already promotes the very first account to admin, but that
check is not atomic.  Running this once before the API is opened to the
public guarantees the admin exists up front:
    python bin/seed_admin.py

The script reads FIRST_ADMIN_EMAIL and FIRST_ADMIN_PASSWORD from the
environment or etc/app.conf.  It creates missing tables, and is a no-op when
the email already exists.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.config import settings          # noqa: E402
from core.security import hash_password   # noqa: E402
from database import Database             # noqa: E402
from models.user import ROLE_ADMIN, User  # noqa: E402


def seed(database=None) -> bool:
    """Insert the configured admin.  Returns True if a row was created."""
    if not settings.first_admin_email or not settings.first_admin_password:
        print("[seed_admin] FIRST_ADMIN_EMAIL or FIRST_ADMIN_PASSWORD not set – nothing to do.")
        return False

    email = settings.first_admin_email.strip().lower()
    database = database or Database(settings.database_url)
    database.create_all()

    db = database.session()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"[seed_admin] User '{email}' already exists – skipping.")
            return False

        admin = User(
            email=email,
            password_hash=hash_password(settings.first_admin_password),
            role=ROLE_ADMIN,
        )
        db.add(admin)
        db.commit()
        print(f"[seed_admin] Admin '{email}' created successfully.")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    seed()
