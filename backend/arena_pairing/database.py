import os
from pathlib import Path
from typing import Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./arena_pairing.db")

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=_echo,
    connect_args=_connect_args,
)


def shuffle_seed_from_env() -> Optional[int]:
    """PAIRING_SHUFFLE_SEED as int, or None when unset/blank."""
    raw = os.getenv("PAIRING_SHUFFLE_SEED", "").strip()
    if not raw:
        return None
    return int(raw)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from arena_pairing.models.pair import Pair  # noqa: F401
    from arena_pairing.models.pair_history import PairHistoryRecord  # noqa: F401
    from arena_pairing.models.seed_designation import SeedDesignation  # noqa: F401

    SQLModel.metadata.create_all(engine)
