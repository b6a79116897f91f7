"""
Create an ADMIN user. The API only ever creates USER accounts, so this is
the way to obtain an identity allowed to add products.

Usage:
  python -m shopql.create_admin --email admin@example.com --password secret
"""
import argparse
import logging

from .auth import PasswordHasher, TokenIssuer
from .config import Settings, load_settings
from .db import Base, create_db_engine, create_session_factory
from .errors import DuplicateEmail
from .logging_config import setup_logging
from .models import User
from .services import AuthService

logger = logging.getLogger(__name__)


def create_admin(settings: Settings, email: str, password: str) -> User:
    engine = create_db_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()
    try:
        service = AuthService(db, PasswordHasher(), TokenIssuer(settings.jwt_secret))
        return service.create_admin(email, password)
    finally:
        db.close()


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Create an ADMIN user")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    args = p.parse_args(argv)

    settings = load_settings()
    setup_logging(settings.log_level)
    try:
        user = create_admin(settings, args.email, args.password)
    except DuplicateEmail as e:
        logger.error("%s: %s", e, args.email)
        return 1
    print(f"Created admin user id={user.id} email={user.email}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
