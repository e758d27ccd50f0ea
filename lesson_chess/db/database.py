"""Generate database session"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from lesson_chess.core.config import Settings, get_settings
from lesson_chess.db.schema import Base


def build_engine(settings: Settings | None = None) -> Engine:
    """Create the engine from configuration and make sure all tables exist."""
    settings = settings or get_settings()
    engine = create_engine(settings.database_url, echo=settings.echo_sql)
    Base.metadata.create_all(bind=engine)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False)

