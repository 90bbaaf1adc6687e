"""Pytest configuration for test discovery and shared fixtures.

This file ensures that:
- `src/` is importable
- client tests share one settings object
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import cast

import pytest
from pydantic import HttpUrl

# Ensure src directory is in path for imports
repo_root = Path(__file__).parent.parent
src_path = repo_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from pageseeder_api.config import ClientCredentials, ClientSettings  # noqa: E402

BASE_URL = "https://ps.example.org"


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(
        base_url=cast(HttpUrl, BASE_URL),
        credentials=ClientCredentials(client_id="client-id", client_secret="client-secret"),
        timeout_seconds=5.0,
        max_attempts=3,
        backoff_base_seconds=0.5,
        backoff_max_seconds=4.0,
    )
