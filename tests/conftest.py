"""Shared fixtures for the conversion tests."""

from datetime import datetime, timezone

import pytest
from bs4 import BeautifulSoup

FIXED_MOMENT = datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2024-05-06T07:08:09.123Z"


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same instant."""
    return lambda: FIXED_MOMENT


@pytest.fixture
def parse():
    """Parse an HTML snippet the same way the converter does."""
    def _parse(html):
        return BeautifulSoup(html, 'lxml')
    return _parse


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration environment variables that would leak into a test."""
    from config_loader import ENV_VARS

    for var_name in ENV_VARS.values():
        monkeypatch.delenv(var_name, raising=False)
    return monkeypatch


@pytest.fixture
def fixed_timestamp():
    """Formatted form of the fixed clock's instant."""
    return FIXED_TIMESTAMP
