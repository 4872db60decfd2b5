import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from sipe.core.config import get_settings
from sipe.core.errors import ConflictError

logger = logging.getLogger(__name__)

DATABASE_URL = get_settings().database_url

# SQLite needs check_same_thread, Postgres must NOT have it
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def commit_or_conflict(db: Session, message: str) -> None:
    """Commit, turning a unique-constraint violation into ``ConflictError``.

    The store's UNIQUE constraints are the only uniqueness check; there is no
    read-before-write lookup.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Write rejected by constraint: %s", e.orig)
        raise ConflictError(message) from e


def init_db() -> None:
    """Check the connection and, when enabled, create missing tables and seed users.

    An unreachable database is fatal: the process exits instead of serving
    requests that can only fail.
    """
    settings = get_settings()

    # register models on Base.metadata
    from sipe.models import equipment, user  # noqa: F401
    from sipe.core.seed import seed_users_if_empty

    try:
        with engine.connect():
            pass
    except OperationalError:
        logger.critical("Cannot connect to database at %s", engine.url.render_as_string(hide_password=True))
        raise SystemExit(1)

    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)

    if settings.seed_default_users:
        db = SessionLocal()
        try:
            seed_users_if_empty(db)
        finally:
            db.close()
