import os

import django
import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "kitchen_portal.settings")


def pytest_configure(config):
    django.setup()
    from django.test.utils import setup_test_environment
    setup_test_environment()


@pytest.fixture
def gateway(monkeypatch):
    """Fake DynamoDB shared by every module that talks to it."""
    from directory import admin_views, decorators, views
    from tests.fakes import FakeDynamoDBClient

    fake = FakeDynamoDBClient()
    for module in (views, admin_views, decorators):
        monkeypatch.setattr(module, "ddb", fake)
    return fake


@pytest.fixture
def fast_hashers(settings_override):
    return settings_override(PASSWORD_HASHERS=["django.contrib.auth.hashers.MD5PasswordHasher"])


@pytest.fixture
def settings_override():
    """Apply django.test.override_settings for the rest of the test."""
    from django.test import override_settings

    active = []

    def apply(**values):
        override = override_settings(**values)
        override.enable()
        active.append(override)
        return override

    yield apply
    for override in reversed(active):
        override.disable()


@pytest.fixture
def client():
    from django.test import Client
    return Client()


def make_profile(gateway, email, password, role):
    from django.contrib.auth.hashers import make_password
    from aws_config import PROFILES_TABLE

    return gateway.upsert(PROFILES_TABLE, {
        "email": email,
        "password": make_password(password),
        "role": role,
    })


@pytest.fixture
def admin_profile(gateway, fast_hashers):
    return make_profile(gateway, "admin@example.com", "secret", "admin")


@pytest.fixture
def admin_client(client, admin_profile):
    response = client.post("/login/", {"email": "admin@example.com", "password": "secret"})
    assert response.status_code == 302
    return client


@pytest.fixture
def user_client(client, gateway, fast_hashers):
    make_profile(gateway, "cook@example.com", "secret", "user")
    response = client.post("/login/", {"email": "cook@example.com", "password": "secret"})
    assert response.status_code == 302
    return client
