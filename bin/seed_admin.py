# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first super admin.

Registration is restricted to super admins, so somebody has to exist before
the register page is usable.  Run once after the initial migration:
    python bin/seed_admin.py

Reads FIRST_ADMIN_USERNAME, FIRST_ADMIN_EMAIL and FIRST_ADMIN_PASSWORD from
etc/app.conf (or the environment).  Safe to re-run.
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

from auth.credentials import create_user, find_by_identifier  # noqa: E402
from core.config import settings                               # noqa: E402
from core.errors import DuplicateError, ValidationError        # noqa: E402
from core.logger import logger                                 # noqa: E402
from database import SessionLocal                              # noqa: E402


def seed() -> int:
    if not (settings.first_admin_username and settings.first_admin_email
            and settings.first_admin_password):
        logger.warning("[seed_admin] FIRST_ADMIN_* not set in etc/app.conf – nothing to do.")
        return 0

    db = SessionLocal()
    try:
        if find_by_identifier(db, settings.first_admin_email):
            logger.info("[seed_admin] '%s' already exists – skipping.", settings.first_admin_email)
            return 0
        try:
            user = create_user(
                db,
                settings.first_admin_username,
                settings.first_admin_email,
                settings.first_admin_password,
                role="super_admin",
            )
        except DuplicateError as exc:
            logger.info("[seed_admin] %s – skipping.", exc.detail)
            return 0
        except ValidationError as exc:
            for err in exc.errors:
                logger.error("[seed_admin] %s: %s", err.field, err.message)
            return 1
        logger.info("[seed_admin] Super admin '%s' created (id=%s).", user.username, user.id)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(seed())
