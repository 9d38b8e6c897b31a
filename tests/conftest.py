"""Shared pytest fixtures for test modules."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all WRESTLING__ env vars so tests are isolated from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("WRESTLING__"):
            monkeypatch.delenv(key)
