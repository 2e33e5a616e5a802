# tests/conftest.py

"""Shared pytest fixtures for all pricewatch tests."""

import os
from collections.abc import Generator

import pytest

_CONFIG_PREFIXES = ("PRICEWATCH_", "PUSHOVER_", "EMAIL_")


@pytest.fixture(autouse=True)
def clean_config_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Drop configuration variables so every test starts from defaults."""
    for name in list(os.environ):
        if name.startswith(_CONFIG_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    yield
