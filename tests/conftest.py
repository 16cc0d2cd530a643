"""
Pytest Configuration

Global pytest configuration, markers and shared fixtures.
"""

import logging
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from caching.backend import CacheBackend  # noqa: E402
from caching.fragment_cache import FragmentCache  # noqa: E402
from widgets.context import RenderContext  # noqa: E402


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class RecordingBackend(CacheBackend):
    """Cache backend that records every call and answers from a plain dict."""

    def __init__(self, always_miss: bool = False):
        self.always_miss = always_miss
        self.store: Dict[tuple, str] = {}
        self.calls: List[Dict[str, Any]] = []

    def fetch_or_store(self, key: Sequence[Any], options: Dict[str, Any], compute: Callable[[], str]) -> str:
        storage_key = tuple(key)
        hit = not self.always_miss and storage_key in self.store
        self.calls.append({"key": list(key), "options": dict(options), "hit": hit})

        if hit:
            return self.store[storage_key]

        content = compute()
        self.store[storage_key] = content
        return content


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def restore_logging(monkeypatch):
    """Undo the global logger changes made by setup_logging."""
    import observability.logging as logging_module

    monkeypatch.setattr(logging_module, "_loggers", dict(logging_module._loggers))
    monkeypatch.setattr(logging_module, "_default_config", logging_module._default_config)

    loggers = [logging.getLogger()] + [
        logger for logger in logging.root.manager.loggerDict.values() if isinstance(logger, logging.Logger)
    ]
    saved = {logger.name: (list(logger.handlers), list(logger.filters), logger.level) for logger in loggers}

    yield

    for logger in [logging.getLogger()] + list(logging.root.manager.loggerDict.values()):
        if not isinstance(logger, logging.Logger):
            continue
        handlers, filters, level = saved.get(logger.name, ([], [], logging.NOTSET))
        logger.handlers[:] = handlers
        logger.filters[:] = filters
        logger.setLevel(level)


@pytest.fixture
def recording_backend():
    return RecordingBackend()


@pytest.fixture
def missing_backend():
    """Backend that reports a miss on every fetch."""
    return RecordingBackend(always_miss=True)


@pytest.fixture
def fragment_cache():
    """Small fragment cache for testing."""
    return FragmentCache(max_size=10)


@pytest.fixture
def render_context(fragment_cache):
    return RenderContext(cache_backend=fragment_cache)


@pytest.fixture
def uncached_context():
    return RenderContext()
