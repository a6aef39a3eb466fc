"""Pytest configuration for backend tests."""
import os
import pytest

# Disable rate limiting middleware during tests
os.environ["TESTING"] = "1"
# Routes read the bundled JSON listings and preferences, never Postgres
os.environ["USE_DATABASE"] = "false"


@pytest.fixture(scope="session")
def anyio_backend():
    """Specify the async backend for pytest-asyncio."""
    return "asyncio"
