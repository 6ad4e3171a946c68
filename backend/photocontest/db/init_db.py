from __future__ import annotations

import logging

import photocontest.models  # noqa: F401
from photocontest.core.config import get_settings
from photocontest.db.base import Base
from photocontest.db.session import engine

LOGGER = logging.getLogger(__name__)


def init_db() -> None:
    """Create missing tables and the upload directory. Alembic owns schema changes after that."""
    Base.metadata.create_all(bind=engine)
    get_settings().upload_root.mkdir(parents=True, exist_ok=True)
    LOGGER.info('Database ready at %s', engine.url.render_as_string(hide_password=True))


if __name__ == '__main__':
    from photocontest.core.logging import configure_logging

    configure_logging()
    init_db()
