import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from seqhub.db import Base
from seqhub.models import ModuleDocument
from seqhub.services.state_store import deserialize_state
from seqhub.services.state_store import load_state
from seqhub.services.state_store import save_state
from seqhub.services.state_store import serialize_state
from seqhub.state import ModuleState


@pytest.fixture
def db() -> Session:
    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    testing_session_local = sessionmaker(
        bind=test_engine,
        autoflush=False,
        autocommit=False,
    )
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


def test_serialize_state_uses_document_field_names() -> None:
    state = ModuleState(start_date="2025-10-19T00:00:00Z", contributions=(0, 5, 10))

    assert serialize_state(state) == {
        "startDate": "2025-10-19T00:00:00Z",
        "contributionsPerDay": [0.0, 5.0, 10.0],
    }


def test_serialize_then_deserialize_returns_same_state() -> None:
    state = ModuleState(start_date="2025-10-19T00:00:00Z", contributions=(0, 3, 7, 10))

    assert deserialize_state(serialize_state(state)) == state


def test_deserialize_missing_fields_gives_empty_state() -> None:
    assert deserialize_state({}) == ModuleState(start_date="", contributions=())


@pytest.mark.parametrize("document", [None, [], "startDate", 42])
def test_deserialize_non_object_document_gives_empty_state(document: object) -> None:
    assert deserialize_state(document) == ModuleState()


def test_deserialize_non_array_contributions_gives_empty_sequence() -> None:
    state = deserialize_state({"startDate": "2025-10-19", "contributionsPerDay": "1,2"})

    assert state.start_date == "2025-10-19"
    assert state.contributions == ()


def test_deserialize_skips_non_numeric_elements() -> None:
    state = deserialize_state(
        {
            "startDate": 20251019,
            "contributionsPerDay": [1, "2", None, True, 3.5, {"x": 1}, float("nan"), 4],
        }
    )

    assert state.start_date == ""
    assert state.contributions == (1.0, 3.5, 4.0)


def test_serialized_document_never_contains_credential() -> None:
    document = serialize_state(ModuleState(start_date="2025-10-19"))

    assert set(document) == {"startDate", "contributionsPerDay"}


def test_load_state_without_saved_document_is_empty(db: Session) -> None:
    assert load_state(db, "default") == ModuleState()


def test_save_state_then_load_state(db: Session) -> None:
    first = ModuleState(start_date="2025-10-19", contributions=(1.0, 2.0))
    second = ModuleState(start_date="2025-10-20", contributions=(3.0,))

    save_state(db, "default", first)
    save_state(db, "default", second)
    save_state(db, "other", first)

    assert load_state(db, "default") == second
    assert load_state(db, "other") == first
    assert db.get(ModuleDocument, "default").document == {
        "startDate": "2025-10-20",
        "contributionsPerDay": [3.0],
    }
