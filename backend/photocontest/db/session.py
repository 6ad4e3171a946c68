from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from photocontest.core.config import get_settings

settings = get_settings()
database_url = settings.resolved_database_url

if database_url.startswith('sqlite:///'):
    Path(settings.backend_root / 'data').mkdir(parents=True, exist_ok=True)

engine = create_engine(
    database_url,
    connect_args={'check_same_thread': False} if database_url.startswith('sqlite') else {},
)

if database_url.startswith('sqlite'):

    # SQLite only honours ON DELETE CASCADE with this pragma set per connection.
    @event.listens_for(engine, 'connect')
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
