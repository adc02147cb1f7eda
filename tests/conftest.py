"""
Shared pytest fixtures and configuration for opstatus tests.

This module provides:
- In-memory store and inspector fixtures
- Workload refs and ready/not-ready workload state builders
- A started StatusManager that is stopped after each test

Usage:
    Fixtures are auto-discovered by pytest; request them as arguments.

    def test_something(manager, store):
        ...
"""

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from opstatus.core.settings import StatusSettings
from opstatus.status.manager import StatusManager
from opstatus.store.memory import InMemoryObjectStore, InMemoryWorkloadInspector
from tests._support.workloads import OPERATOR, RELEASE


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any logging configuration a test applied."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Store / Manager Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def inspector() -> InMemoryWorkloadInspector:
    return InMemoryWorkloadInspector()


@pytest.fixture
def settings() -> StatusSettings:
    return StatusSettings(operator_name=OPERATOR, release_version=RELEASE)


@pytest.fixture
def manager(settings, store, inspector) -> Generator[StatusManager, None, None]:
    """A started manager; stopped (after draining) at teardown."""
    mgr = StatusManager.from_settings(settings, store, inspector).start()
    yield mgr
    mgr.stop(timeout=5)
