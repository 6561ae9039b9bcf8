"""Pytest configuration for tests.

Sets up Python path and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to Python path so imports work correctly
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep STATUS_* variables from the developer's shell out of tests."""
    for key in (
        "STATUS_SERVER_URL",
        "STATUS_USE_WEBSOCKET",
        "STATUS_POLLING_METHOD",
        "STATUS_INITIAL_DELAY",
        "STATUS_MAX_DELAY",
        "STATUS_MAX_RETRIES",
        "STATUS_TIMEOUT",
        "STATUS_REQUEST_TIMEOUT",
        "STATUS_PATH",
    ):
        monkeypatch.delenv(key, raising=False)
