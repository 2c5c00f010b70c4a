import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

SECRET = "test-secret"


@pytest.fixture
def settings():
    return Settings(database_name="catalog_test", token_secret=SECRET)


@pytest.fixture
def db(settings):
    return mongomock.MongoClient()[settings.database_name]


@pytest.fixture
def app(settings, db):
    return create_app(settings, database=db)


@pytest.fixture
def client(app):
    return TestClient(app)


def register_and_login(client, email="a@x.com", password="pw1"):
    resp = client.post("/signup", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    resp = client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["accessToken"]


@pytest.fixture
def token(client):
    return register_and_login(client)


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_product(client, auth_headers):
    def _make(**fields):
        body = {"name": "Widget", "price": 10, "company": "Acme", "rating": 4, "featured": False}
        body.update(fields)
        resp = client.post("/products", json=body, headers=auth_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
