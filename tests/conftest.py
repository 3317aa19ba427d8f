import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api import create_app
from models import storage


@pytest.fixture()
def app(tmp_path):
    """Per-test app on its own SQLite file, so no state leaks between tests."""
    app = create_app("testing", {"DATABASE_URL": f"sqlite:///{tmp_path / 'auth.db'}"})
    ctx = app.app_context()
    ctx.push()
    yield app
    ctx.pop()
    storage.close()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_flow(app):
    return app.extensions["auth_flow"]


@pytest.fixture()
def register_user(auth_flow):
    """Register a user through the controller and return the issued session."""
    def _register(email="a@x.com", password="pw", **profile):
        profile.setdefault("name", "Alice")
        return auth_flow.register(email, password, **profile)

    return _register


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
