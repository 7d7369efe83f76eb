"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or a production config
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_FORMAT", "text")
