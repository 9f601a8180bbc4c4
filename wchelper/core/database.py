"""Local store connection and slot-store wiring."""

from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from wchelper.core.config import settings
from wchelper.core.store import SqlSlotStore

_connect_args = {"check_same_thread": False} if settings.STORE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.STORE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

slot_store = SqlSlotStore(SessionLocal)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store() -> SqlSlotStore:
    """Dependency returning the process-wide slot store."""
    return slot_store


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the local store is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
