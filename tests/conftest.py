"""Shared fixtures for the test suite."""

import pytest
import respx

from .helpers import make_query


@pytest.fixture
def query():
    return make_query()


@pytest.fixture
def mock_steam():
    """Create a respx mock for the Steam endpoints."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock
