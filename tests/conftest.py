"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before anything imports ``app.core.config``
so settings are built with test values.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "100")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "3600")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from app.core.rate_limit import reset_rate_limiter


@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    """Every test starts with an empty rate limit store."""
    reset_rate_limiter()
    yield
    reset_rate_limiter()
