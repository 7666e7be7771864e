# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""pytest plugin: session-wide mock registry and per-test mounting fixtures.

Registered through the ``pytest11`` entry point, so installing the package
makes these fixtures available:

- harness_config: HarnessConfig from <rootdir>/.component_harness.yml
- runtime_services: default ambient mocks, installed once and frozen
- navigation_calls: recorder of navigation-api calls, reset per test
- page_store: the mocked page store, restored after each test
- render / render_inline: mount helpers bound to runtime_services

Anything still mounted at the end of a test is unmounted when
``auto_cleanup`` is enabled.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest

from .ambient import AMBIENT_STORES, NavigationRecorder, install_default_registry
from .config import CONFIG_FILENAME, HarnessConfig
from .logging_setup import setup_logging
from .mocks import RuntimeServices
from .render import MountedComponent, cleanup, mounted
from .render import render as render_component
from .render import render_inline as render_inline_component
from .runtime import scheduler
from .stores import WritableStore, get

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def harness_config(pytestconfig: pytest.Config) -> HarnessConfig:
    return HarnessConfig(Path(str(pytestconfig.rootpath)) / CONFIG_FILENAME)


@pytest.fixture(scope="session")
def navigation_recorder() -> NavigationRecorder:
    return NavigationRecorder()


@pytest.fixture(scope="session")
def runtime_services(
    harness_config: HarnessConfig, navigation_recorder: NavigationRecorder
) -> RuntimeServices:
    if harness_config.enable_structured_logging:
        setup_logging(log_level=harness_config.log_level, console_output=False)
    scheduler.tick_limit = harness_config.tick_limit
    return install_default_registry(harness_config, navigation_recorder)


@pytest.fixture
def navigation_calls(navigation_recorder: NavigationRecorder) -> Iterator[NavigationRecorder]:
    navigation_recorder.reset()
    yield navigation_recorder
    navigation_recorder.reset()


@pytest.fixture
def page_store(runtime_services: RuntimeServices) -> Iterator[WritableStore]:
    store = runtime_services.module(AMBIENT_STORES).page
    initial = get(store)
    yield store
    store.set(initial)


@pytest.fixture
def render(runtime_services: RuntimeServices) -> Callable[..., MountedComponent]:
    def _render(component_class: type, props: Any = None, **kwargs: Any) -> Any:
        kwargs.setdefault("services", runtime_services)
        return render_component(component_class, props, **kwargs)

    return _render


@pytest.fixture
def render_inline(runtime_services: RuntimeServices) -> Callable[..., MountedComponent]:
    def _render_inline(template: Any, *values: Any, **kwargs: Any) -> Any:
        kwargs.setdefault("services", runtime_services)
        return render_inline_component(template, *values, **kwargs)

    return _render_inline


@pytest.fixture(autouse=True)
def _component_harness_cleanup(harness_config: HarnessConfig) -> Iterator[None]:
    yield
    if harness_config.auto_cleanup:
        cleanup()
    elif mounted():
        logger.warning(f"{len(mounted())} components left mounted after test")
