"""Shared fixtures for the recsan test suite."""

import os

import pytest

from recsan import NOT_LOADED


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of RECSAN_* variables and local .env files."""
    for name in list(os.environ):
        if name.upper().startswith("RECSAN_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def user_record():
    return {
        "id": 7,
        "name": "John",
        "email": "john@example.com",
        "password": "secret",
        "profile": {"bio": "Test", "private": True, "password": "nested-secret"},
        "orders": NOT_LOADED,
        "tags": ["admin", "staff"],
    }
