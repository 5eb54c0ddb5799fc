# tests/conftest.py
import os

# the app engine is built at import time; keep it off the developer database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from unittest.mock import MagicMock
from uuid import uuid4
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.database import get_db, init_db
from app.main import app
from tests.utils import Factory

@pytest.fixture
def mock_db_session():
    """MagicMock Session with chainable query()"""
    session = MagicMock(spec=Session)
    session.query.return_value.filter.return_value = session.query.return_value
    session.query.return_value.options.return_value = session.query.return_value
    session.query.return_value.join.return_value = session.query.return_value
    session.query.return_value.order_by.return_value = session.query.return_value
    return session

@pytest.fixture
def sample_user_id():
    return uuid4()

@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so separate connections (and threads) see each other's commits."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)

@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def factory(db):
    return Factory(db)

