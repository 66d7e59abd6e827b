"""Root conftest.py for hwtest-gpio.

Puts the package src directories on sys.path so the tests run from a plain
checkout, registers the custom markers and marks tests that run against
the in-memory fake sysfs tree instead of a real board.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.nodes import Item


PROJECT_ROOT = Path(__file__).parent
for pkg_dir in PROJECT_ROOT.glob("hwtest-*/src"):
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))

# Fixtures that stand in for the kernel GPIO interface.
MOCK_FIXTURES = frozenset({"fake_sysfs", "controller", "mocker"})


def pytest_configure(config: Config) -> None:
    """Register custom markers.

    Args:
        config: pytest configuration object.
    """
    config.addinivalue_line(
        "markers",
        "uses_mock: Test uses mocking (auto-detected or manually marked)",
    )
    config.addinivalue_line(
        "markers",
        "integration: Integration test requiring a real /sys/class/gpio",
    )
    config.addinivalue_line(
        "markers",
        "slow: Slow-running test",
    )


def pytest_collection_modifyitems(config: Config, items: list[Item]) -> None:
    """Mark tests that depend on fake or mocked GPIO fixtures.

    Args:
        config: pytest configuration object.
        items: List of collected test items.
    """
    for item in items:
        if item.get_closest_marker("uses_mock"):
            continue
        fixtures = set(getattr(item, "fixturenames", ()))
        if fixtures & MOCK_FIXTURES or "mock" in item.name.lower():
            item.add_marker(pytest.mark.uses_mock)
