"""Wire configuration, logging, database and service together for a host application."""

import logging

from sqlalchemy import make_url
from sqlalchemy.orm import Session

from lesson_chess.core.config import Settings, get_settings
from lesson_chess.core.log import configure_logging
from lesson_chess.db.database import build_engine, build_session_factory
from lesson_chess.db.sql_repository import SQLGameRepository
from lesson_chess.services.chess_service import ChessService

logger = logging.getLogger(__name__)


def create_service(
    settings: Settings | None = None, session: Session | None = None
) -> ChessService:
    """
    Build a ChessService backed by the configured database.

    Pass a session to reuse an existing connection (tests, or a host that manages its own sessions).
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if session is None:
        session = build_session_factory(build_engine(settings))()
    logger.info(
        "Chess service ready (database: %s)",
        make_url(settings.database_url).render_as_string(hide_password=True),
    )
    return ChessService(SQLGameRepository(session))
