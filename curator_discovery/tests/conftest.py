"""Pytest configuration and fixtures."""

import pytest

from curator_discovery.tests.fakes import MockStore


@pytest.fixture
def mock_store():
    return MockStore()
