import os
from typing import Generator

import pytest
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("JWT_SECRET", "test-secret")

from shopql.auth import PasswordHasher, TokenIssuer
from shopql.config import Settings
from shopql.context import Authenticated
from shopql.db import Base, create_db_engine
from shopql.main import create_app, get_db
from shopql.models import Role
from shopql.services import AuthService

TEST_SECRET = "test-secret"


@pytest.fixture(scope="function")
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, database_url="sqlite://")


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # In-memory SQLite on a single shared connection, foreign keys enforced
    engine = create_db_engine("sqlite://")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # Low work factor keeps the suite fast; the algorithm is unchanged
    return PasswordHasher(rounds=1000)


@pytest.fixture(scope="session")
def tokens() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest.fixture(scope="function")
def auth_service(db_session, hasher, tokens) -> AuthService:
    return AuthService(db_session, hasher, tokens)


@pytest.fixture(scope="function")
def admin(auth_service) -> Authenticated:
    user = auth_service.create_admin("admin@x.com", "adminpw")
    return Authenticated(user_id=user.id, role=Role.ADMIN)


@pytest.fixture(scope="function")
def app(settings):
    return create_app(settings)


@pytest.fixture(scope="function")
def client(app, db_session):
    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def gql(client):
    """Run a GraphQL operation and return the decoded response body."""
    def run(query: str, variables: dict | None = None, token: str | None = None) -> dict:
        headers = {"authorization": token} if token is not None else {}
        r = client.post("/graphql", json={"query": query, "variables": variables or {}}, headers=headers)
        assert r.status_code == 200
        return r.json()
    return run


@pytest.fixture(scope="function")
def admin_token(admin, tokens) -> str:
    return tokens.issue(admin.user_id, admin.role)
