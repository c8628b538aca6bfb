"""
Shared fixtures.

`client` is a TestClient over a fresh app seeded from SITE (through the
real YAML loader), so every test starts from the same small site.
"""

import pytest
import yaml
from fastapi.testclient import TestClient

from arc.access.store import AccessPolicyStore
from arc.api.app import create_app
from arc.auth.context import ViewerContext
from arc.auth.jwt import create_nonce
from arc.auth.capabilities import Role
from arc.auth.users import UserStore
from arc.config import Settings
from arc.content.repository import ContentRepository
from arc.core.hooks import HookDispatcher
from arc.plugin.bootstrap import RestrictedContentPlugin
from arc.plugin.public import AJAX_LOGIN_ACTION
from arc.storage import create_local_storage

PASSWORD = "correct-horse-battery"

SITE = {
    "users": [
        {"username": "admin", "email": "admin@example.com", "password": PASSWORD, "role": "administrator"},
        {"username": "editor", "email": "editor@example.com", "password": PASSWORD, "role": "editor"},
        {"username": "author", "email": "author@example.com", "password": PASSWORD, "role": "author"},
        {"username": "reader", "email": "reader@example.com", "password": PASSWORD, "role": "subscriber"},
    ],
    "categories": [
        {"id": "cat_general", "name": "General"},
        {"id": "cat_members", "name": "Members", "restricted": True},
    ],
    "tags": [
        {"id": "tag_news", "name": "News"},
        {"id": "tag_internal", "name": "Internal", "restricted": True},
    ],
    "posts": [
        {"id": "post_public", "title": "Public Post", "author": "admin",
         "categories": ["general"], "tags": ["news"]},
        {"id": "post_secret", "title": "Secret Post", "author": "editor",
         "categories": ["general"], "tags": ["internal"], "restricted": True},
        {"id": "post_filed", "title": "Filed Post", "categories": ["members"]},
    ],
    "pages": [
        {"id": "page_about", "title": "About", "menu_order": 1},
        {"id": "page_handbook", "title": "Handbook", "menu_order": 2, "restricted": True},
    ],
    "comments": [
        {"post": "public-post", "author_name": "Ann", "content": "Visible comment"},
        {"post": "secret-post", "author_name": "Bob", "content": "Hidden comment"},
    ],
}


def make_settings(**overrides) -> Settings:
    values = {
        "environment": "test",
        "jwt_secret_key": "test-secret",
        "site_seed_path": "",
        "sentry_dsn": "",
    }
    values.update(overrides)
    return Settings(**values)


# =============================================================================
# Unit fixtures
# =============================================================================


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def storage():
    return create_local_storage()


@pytest.fixture
def repo(storage):
    return ContentRepository(storage)


@pytest.fixture
def access(repo):
    return AccessPolicyStore(repo)


@pytest.fixture
def users(storage):
    return UserStore(storage)


@pytest.fixture
def plugin(repo, users, settings, access):
    return RestrictedContentPlugin(repo, users, settings, access=access)


@pytest.fixture
def dispatcher(plugin):
    hooks = HookDispatcher()
    plugin.run(hooks)
    return hooks


@pytest.fixture
def anonymous():
    return ViewerContext.anonymous()


@pytest.fixture
def member():
    return ViewerContext(user_id="user_1", username="reader", role=Role.SUBSCRIBER)


# =============================================================================
# App fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path):
    seed = tmp_path / "site.yaml"
    seed.write_text(yaml.safe_dump(SITE))
    return create_app(settings=make_settings(site_seed_path=str(seed)))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    """Authorization header for a seeded user, via /auth/login."""
    def headers(username: str) -> dict[str, str]:
        response = client.post("/auth/login", json={"username": username, "password": PASSWORD})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return headers


@pytest.fixture
def inline_login(client):
    """Post the inline login form with a freshly minted nonce."""
    def login(username: str = "reader", password: str = PASSWORD, **extra):
        nonce = create_nonce(AJAX_LOGIN_ACTION, client.app.state.settings)
        data = {"username": username, "password": password, "security": nonce, **extra}
        return client.post("/ajax/login", data=data)
    return login
