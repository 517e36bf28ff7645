"""Pytest configuration and shared fixtures."""

import sys
import asyncio
import inspect
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from care_stats.config import Config  # noqa: E402


# Monday
FIXED_NOW = datetime(2026, 10, 19, 15, 30, tzinfo=timezone.utc)


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    """Execute async tests without external plugins."""
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            sig = inspect.signature(testfunction)
            call_kwargs = {name: pyfuncitem.funcargs[name] for name in sig.parameters}
            loop.run_until_complete(testfunction(**call_kwargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's config file and API key."""
    monkeypatch.setenv("CARE_STATS_CONFIG", str(tmp_path / "missing-config.yaml"))
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    Config._instance = None
    yield
    Config._instance = None


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
