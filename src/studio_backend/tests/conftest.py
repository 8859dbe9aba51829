"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import uuid
import pytest

# Ensure studio_backend is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from studio_backend.permissions.cache import AuthorizationCache
from studio_backend.permissions.core import AuthorizationEngine
from studio_backend.permissions.observers import MutationObserver
from studio_backend.permissions.store import InMemoryRoleStore
from studio_backend.settings import AuthorizationSettings


@pytest.fixture
def settings():
    """Settings with a per-test cache prefix so tests never share cache state."""
    return AuthorizationSettings(cache_prefix=f"test_{uuid.uuid4().hex}_")


@pytest.fixture
def cache(settings):
    return AuthorizationCache(settings)


@pytest.fixture
def engine(settings, cache):
    return AuthorizationEngine(settings, cache=cache)


@pytest.fixture
def store(settings, cache):
    """Store wired to invalidate the shared cache, targeting role holders."""
    store = InMemoryRoleStore(settings)
    store.observer = MutationObserver(cache, role_members=store.role_members)
    return store
