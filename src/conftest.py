"""Shared pytest fixtures and factories for asset tracker tests."""

import pytest

from django.conf import settings

# Plain static storage for tests (no collectstatic manifest needed)
settings.STORAGES["staticfiles"] = {
    "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
}

from assets.factories import (  # noqa: E402
    AssetFactory,
    CatalogFactory,
    UserFactory,
)

# Lifecycle used by the end-to-end recycling scenarios
RECYCLING_LIFECYCLE = {
    "initial": ["new"],
    "inactive": ["stolen", "recycled"],
    "transitions": {
        "": ["new"],
        "new": ["stolen", "recycled"],
    },
}


def _group(name):
    from assets.management.commands.setup_groups import ensure_group

    return ensure_group(name)


# --- User fixtures ---


@pytest.fixture
def password():
    return "testpass123!"


@pytest.fixture
def user(db, password):
    u = UserFactory(
        username="testuser",
        email="test@example.com",
        password=password,
        display_name="Test User",
    )
    u.groups.add(_group("Asset Editor"))
    return u


@pytest.fixture
def admin_user(db, password):
    return UserFactory(
        username="admin",
        email="admin@example.com",
        password=password,
        display_name="Admin",
        is_staff=True,
        is_superuser=True,
    )


@pytest.fixture
def viewer_user(db, password):
    u = UserFactory(
        username="viewer",
        email="viewer@example.com",
        password=password,
        display_name="Viewer",
    )
    u.groups.add(_group("Asset Viewer"))
    return u


@pytest.fixture
def modifier_user(db, password):
    """Can change assets but not create them."""
    from django.contrib.auth.models import Permission

    u = UserFactory(
        username="modifier",
        email="modifier@example.com",
        password=password,
        display_name="Modifier",
    )
    u.user_permissions.add(
        Permission.objects.get(
            content_type__app_label="assets", codename="change_asset"
        )
    )
    return u


@pytest.fixture
def outsider(db, password):
    return UserFactory(
        username="outsider",
        email="outsider@example.com",
        password=password,
        display_name="Outsider",
    )


@pytest.fixture
def second_user(db, password):
    return UserFactory(
        username="second",
        email="second@example.com",
        password=password,
        display_name="Second User",
    )


@pytest.fixture
def admin_client(client, admin_user, password):
    client.login(username=admin_user.username, password=password)
    return client


# --- Core model fixtures ---


@pytest.fixture
def catalog(db):
    return CatalogFactory(name="IT Equipment", description="Laptops etc.")


@pytest.fixture
def disabled_catalog(db):
    return CatalogFactory(name="Retired Stock", disabled=True)


@pytest.fixture
def asset(catalog, user):
    return AssetFactory(
        name="Laptop 42",
        description="Loaner laptop",
        catalog=catalog,
        status="new",
        created_by=user,
    )


@pytest.fixture
def recycling(settings, db):
    """Install a second lifecycle and return a catalog that uses it."""
    settings.ASSET_LIFECYCLES = {
        **settings.ASSET_LIFECYCLES,
        "recycling": RECYCLING_LIFECYCLE,
    }
    return CatalogFactory(name="Recycling Bin", lifecycle="recycling")
