# tests/conftest.py
import os, sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ["APP_ENV"] = "test"

from notesapp import create_app
from notesapp.extensions import db
from notesapp.auth.google import GoogleAuthError, GoogleIdentity

PASSWORD = "Abcdef1!"


@pytest.fixture(scope="session")
def app():
    app = create_app({"TESTING": True})
    with app.app_context():
        # tables propres pour la session de tests
        db.drop_all()
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def _clean_tables(app):
    yield
    with app.app_context():
        db.session.remove()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()


@pytest.fixture()
def client(app):
    return app.test_client()


class FakeGoogleVerifier:
    """Remplace GoogleVerifier: credential -> identité connue, sinon échec."""

    def __init__(self):
        self.identities = {}

    def add(self, credential, email, sub):
        self.identities[credential] = GoogleIdentity(email=email, sub=sub)

    def verify(self, credential):
        try:
            return self.identities[credential]
        except KeyError:
            raise GoogleAuthError("Wrong number of segments in token")


@pytest.fixture()
def google(app):
    real = app.extensions["google_verifier"]
    fake = FakeGoogleVerifier()
    app.extensions["google_verifier"] = fake
    yield fake
    app.extensions["google_verifier"] = real


def register(client, email, password=PASSWORD):
    return client.post("/api/v1/users/register", json={"email": email, "password": password})


def login(client, email, password=PASSWORD):
    return client.post("/api/v1/users/login", json={"email": email, "password": password})


@pytest.fixture()
def make_user(app):
    """Crée un utilisateur et renvoie un test client déjà connecté."""
    def _make(email):
        c = app.test_client()
        assert register(c, email).status_code == 201
        assert login(c, email).status_code == 200
        return c
    return _make


@pytest.fixture()
def restore_limiter():
    """Le Limiter est global: chaque app créée en test le réactive."""
    from notesapp.extensions import limiter
    yield limiter
    limiter.enabled = False
