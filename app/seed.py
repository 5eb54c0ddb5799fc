"""
Create the schema and an initial admin account (idempotent).

    python -m app.seed --email admin@example.com --password 'Secret123'

Email and password default to SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD.
"""
import argparse
import logging
import os
from app.core.database import SessionLocal, init_db
from app.core.logging import configure_logging
from app.models.user import UserRole, UserStatus
from app.repositories.user import user_repository

logger = logging.getLogger(__name__)

def seed_admin(email: str, password: str, first_name: str = "System", last_name: str = "Admin") -> bool:
    """Create the admin unless a user with that email exists. Returns True when created."""
    db = SessionLocal()
    try:
        if user_repository.get_by_email(db, email):
            logger.info(f"Admin {email} already exists")
            return False
        user_repository.create_user(db, {
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "role": UserRole.ADMIN,
            "status": UserStatus.ACTIVE,
            "is_first_login": True,
        })
        db.commit()
        logger.info(f"Admin {email} created")
        return True
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Initialize the database and create an admin user")
    parser.add_argument("--email", default=os.getenv("SEED_ADMIN_EMAIL", "admin@example.com"))
    parser.add_argument("--password", default=os.getenv("SEED_ADMIN_PASSWORD"))
    parser.add_argument("--first-name", default="System")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--skip-create-all", action="store_true", help="Assume alembic already created the schema")
    args = parser.parse_args(argv)

    if not args.password:
        parser.error("--password or SEED_ADMIN_PASSWORD is required")

    configure_logging()
    if not args.skip_create_all:
        init_db()
    created = seed_admin(args.email, args.password, args.first_name, args.last_name)
    print("Admin created." if created else "Admin already present.")

if __name__ == "__main__":
    main()
