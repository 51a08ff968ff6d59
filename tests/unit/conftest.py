"""Unit test environment helpers."""

import os

import pytest


@pytest.fixture(autouse=True)
def _minimal_env(monkeypatch):
    """Clear fingerprint limit overrides so tests see the defaults."""
    for key in list(os.environ):
        if key.startswith("QUERYDIGEST_"):
            monkeypatch.delenv(key, raising=False)
    yield
