import pytest
from fastapi.testclient import TestClient

from finance_api.config import Settings
from finance_api.db import init_db, make_engine, make_session_factory
from finance_api.main import create_app


@pytest.fixture(scope="function")
def app():
    """
    Fresh application over its own in-memory SQLite database.
    """
    return create_app(Settings(database_url="sqlite://"))


@pytest.fixture(scope="function")
def client(app):
    # entering the client runs the startup hook, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def session():
    """
    Bare session for exercising crud functions without HTTP.
    """
    engine = make_engine("sqlite://")
    init_db(engine)
    db = make_session_factory(engine)()
    yield db
    db.close()
    engine.dispose()


@pytest.fixture
def new_user():
    def _make(username="ana", email="a@x.com", password="secret", confirmation=None):
        return {
            "username": username,
            "email": email,
            "password": password,
            "password_confirmation": password if confirmation is None else confirmation,
        }
    return _make
