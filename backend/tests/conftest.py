import os
import tempfile

# Point the application at a throwaway database before it is imported;
# each test then gets its own database through the get_db override.
_BOOTSTRAP_DIR = tempfile.mkdtemp(prefix="gameprogress-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite:///{}".format(os.path.join(_BOOTSTRAP_DIR, "bootstrap.db")))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from gameprogress.database import build_engine, create_tables, get_db
from gameprogress.main import app


@pytest.fixture
def engine(tmp_path):
    eng = build_engine("sqlite:///{}".format(tmp_path / "progress.db"))
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
