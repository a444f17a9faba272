"""Database configuration and session management.

The engine is configured for SQLite by default:

    - **WAL (Write-Ahead Logging)**: the daily notifier and queued email jobs
      read while staff edit the calendar.
    - **Foreign Keys**: disabled by default in SQLite; enabled so event rows
      cannot point at missing job elements, users or states.
    - **check_same_thread=False**: FastAPI may hand a session to another thread.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine, select

from studio_ops.core.config import settings
from studio_ops.core.constants import EVENT_STATUS_NAMES, EVENT_TYPE_NAMES, STATES

connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection."""
    if not settings.database_url.startswith("sqlite"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    # Importing the models registers their tables on the metadata.
    import studio_ops.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def seed_reference_data(session: Session) -> None:
    """Insert any missing state, event type and event status rows."""
    from studio_ops.models import EventStatus, EventType, State

    existing = {s.id for s in session.exec(select(State)).all()}
    for state_id, (name, in_charge) in STATES.items():
        if state_id not in existing:
            session.add(State(id=state_id, name=name, code=name, state_in_charge=in_charge))

    existing = {t.id for t in session.exec(select(EventType)).all()}
    for type_id, name in EVENT_TYPE_NAMES.items():
        if type_id not in existing:
            session.add(EventType(id=type_id, name=name))

    existing = {s.id for s in session.exec(select(EventStatus)).all()}
    for status_id, name in EVENT_STATUS_NAMES.items():
        if status_id not in existing:
            session.add(EventStatus(id=status_id, name=name))

    session.commit()


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
