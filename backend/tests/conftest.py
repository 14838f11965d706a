"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database by accident
os.environ.setdefault(
    "BUILDSHARE_DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("BUILDSHARE_LOG_FORMAT", "text")
