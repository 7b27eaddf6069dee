import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from arena_pairing.services.pair_history import PairHistoryLedger
from arena_pairing.services.pair_store import PairStore
from arena_pairing.services.seed_registry import SeedRegistry

TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(name="engine")
def engine_fixture():
    """Fresh in-memory database per test

    StaticPool keeps one connection so every session sees the same :memory: DB.
    """
    # Import all models to ensure they're registered BEFORE create_all
    from arena_pairing.models.pair import Pair  # noqa: F401
    from arena_pairing.models.pair_history import PairHistoryRecord  # noqa: F401
    from arena_pairing.models.seed_designation import SeedDesignation  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def seeds(session: Session) -> SeedRegistry:
    return SeedRegistry(session)


@pytest.fixture
def ledger(session: Session, seeds: SeedRegistry) -> PairHistoryLedger:
    return PairHistoryLedger(session, seeds)


@pytest.fixture
def store(session: Session) -> PairStore:
    return PairStore(session)


