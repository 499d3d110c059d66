# tests/conftest.py

"""Shared pytest fixtures for all catalog tests."""

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_session() -> Generator[MagicMock, None, None]:
    """Replace the curl_cffi session class so no test touches the network."""
    with patch(
        "src.api.products_client.curl_requests.Session"
    ) as session_cls:
        yield session_cls
