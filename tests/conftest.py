import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import UserStore
from catalog import CatalogStore
from database import ensure_indexes, get_db
from main import app

PASSWORD = "s3cret-Pass"


@pytest.fixture
def db():
    database = mongomock.MongoClient()["restaurant_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def users(db):
    return UserStore(db)


@pytest.fixture
def catalog(db):
    return CatalogStore(db)


@pytest.fixture
def token_for(users):
    """Create an account with the given role and return a session token for it."""
    def make(username, role):
        users.create_user(username, PASSWORD, role)
        return users.login(username, PASSWORD)
    return make


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def gql(client):
    def run(query, variables=None, token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return client.post("/graphql", json={"query": query, "variables": variables or {}}, headers=headers)
    return run
