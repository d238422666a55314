"""SQLite engine and session for the conversation store."""

import logging

from sqlalchemy import text
from sqlmodel import SQLModel, create_engine, Session

from genshai.core.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    f"sqlite:///{settings.db_path}",
    echo=settings.debug,
    connect_args={"check_same_thread": False},
)


def init_db() -> None:
    """Create tables and the history index on first start."""
    import genshai.models  # noqa: F401 - ensure models are registered
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)
    _ensure_history_index()
    logger.info(f"Conversation store ready at {settings.db_path}")


def _ensure_history_index() -> None:
    # Context loading reads the newest messages of one conversation first.
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE INDEX IF NOT EXISTS ix_message_conversation_created "
                "ON message(conversation_id, created_at)"
            )
        )


def get_session():
    with Session(engine) as session:
        yield session
