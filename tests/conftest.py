# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Shared fixtures for the harness test suite.

The session-wide fixtures (runtime_services, render, navigation_calls, ...)
come from the component_harness pytest plugin. The fixtures here build
isolated registries for tests that need different flag values.
"""

from typing import Any, Callable, Iterator

import pytest

from component_harness.ambient import NavigationRecorder, install_default_registry
from component_harness.config import HarnessConfig
from component_harness.dom import Document
from component_harness.mocks import RuntimeServices
from component_harness.runtime import scheduler


@pytest.fixture
def document() -> Document:
    return Document()


@pytest.fixture
def make_services() -> Callable[..., RuntimeServices]:
    """Factory for frozen services with config overrides.

    Example:
        services = make_services(env_dev=False)
    """

    def _make(recorder: Any = None, **overrides: Any) -> RuntimeServices:
        config = HarnessConfig.from_dict(overrides)
        return install_default_registry(config, recorder or NavigationRecorder())

    return _make


@pytest.fixture(autouse=True)
def _reset_scheduler() -> Iterator[None]:
    tick_limit = scheduler.tick_limit
    yield
    scheduler.tick_limit = tick_limit
    scheduler._dirty.clear()
