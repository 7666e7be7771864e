# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Default mocks for the framework's ambient runtime modules.

Three modules are provided:
- environment-flags: browser, dev, building, version
- navigation-api: navigation functions that only record their calls
- ambient-stores: page, navigating and updated stores

Nothing here navigates, touches storage or reaches the network.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import HarnessConfig
from .mocks import MockModuleSpec, MockRegistry, RuntimeServices
from .stores import ReadableStore, StaleFlagStore, WritableStore

logger = logging.getLogger(__name__)

ENVIRONMENT_FLAGS = "environment-flags"
NAVIGATION_API = "navigation-api"
AMBIENT_STORES = "ambient-stores"

# Exported surface of each real module
ENVIRONMENT_SURFACE: Tuple[str, ...] = ("browser", "dev", "building", "version")
NAVIGATION_SURFACE: Tuple[str, ...] = (
    "goto",
    "invalidate",
    "invalidate_all",
    "preload_data",
    "preload_code",
    "before_navigate",
    "after_navigate",
    "on_navigate",
    "push_state",
    "replace_state",
    "disable_scroll_handling",
)
STORES_SURFACE: Tuple[str, ...] = ("page", "navigating", "updated", "get_stores")


@dataclass(frozen=True)
class PageState:
    """Value held by the mocked page store."""

    url: str = "http://localhost/"
    params: Dict[str, str] = field(default_factory=dict)
    route_id: Optional[str] = None
    status: int = 200
    error: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    form: Any = None
    state: Dict[str, Any] = field(default_factory=dict)

    def with_changes(self, **changes: Any) -> "PageState":
        return replace(self, **changes)


@dataclass
class NavigationCall:
    name: str
    args: Tuple[Any, ...]
    kwargs: Dict[str, Any]


class NavigationRecorder:
    """Records every call made through the mocked navigation-api."""

    def __init__(self) -> None:
        self.calls: List[NavigationCall] = []

    def record(self, name: str, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> None:
        self.calls.append(NavigationCall(name, args, kwargs))
        logger.debug(f"navigation-api.{name} called with {args!r} {kwargs!r}")

    def calls_to(self, name: str) -> List[NavigationCall]:
        return [call for call in self.calls if call.name == name]

    def reset(self) -> None:
        self.calls.clear()


def _recording(recorder: NavigationRecorder, name: str, result: Any = None) -> Callable[..., Any]:
    def navigation_stub(*args: Any, **kwargs: Any) -> Any:
        recorder.record(name, args, kwargs)
        return result

    navigation_stub.__name__ = name
    return navigation_stub


def _recording_async(
    recorder: NavigationRecorder, name: str, result: Any = None
) -> Callable[..., Any]:
    async def navigation_stub(*args: Any, **kwargs: Any) -> Any:
        recorder.record(name, args, kwargs)
        return result

    navigation_stub.__name__ = name
    return navigation_stub


def environment_mock(config: HarnessConfig) -> MockModuleSpec:
    return MockModuleSpec(
        name=ENVIRONMENT_FLAGS,
        symbols={
            "browser": config.env_browser,
            "dev": config.env_dev,
            "building": config.env_building,
            "version": config.app_version,
        },
        surface=ENVIRONMENT_SURFACE,
    )


def navigation_mock(recorder: NavigationRecorder) -> MockModuleSpec:
    """Navigation functions resolve immediately and never navigate."""
    symbols: Dict[str, Any] = {
        "goto": _recording_async(recorder, "goto"),
        "invalidate": _recording_async(recorder, "invalidate"),
        "invalidate_all": _recording_async(recorder, "invalidate_all"),
        "preload_data": _recording_async(
            recorder, "preload_data", {"type": "loaded", "status": 200, "data": {}}
        ),
        "preload_code": _recording_async(recorder, "preload_code"),
        "before_navigate": _recording(recorder, "before_navigate"),
        "after_navigate": _recording(recorder, "after_navigate"),
        "on_navigate": _recording(recorder, "on_navigate"),
        "push_state": _recording(recorder, "push_state"),
        "replace_state": _recording(recorder, "replace_state"),
        "disable_scroll_handling": _recording(recorder, "disable_scroll_handling"),
    }
    return MockModuleSpec(name=NAVIGATION_API, symbols=symbols, surface=NAVIGATION_SURFACE)


def stores_mock(config: HarnessConfig) -> MockModuleSpec:
    page = WritableStore(PageState(url=config.page_url))
    navigating = ReadableStore(None)
    updated = StaleFlagStore()

    def get_stores() -> Dict[str, ReadableStore]:
        return {"page": page, "navigating": navigating, "updated": updated}

    return MockModuleSpec(
        name=AMBIENT_STORES,
        symbols={
            "page": page,
            "navigating": navigating,
            "updated": updated,
            "get_stores": get_stores,
        },
        surface=STORES_SURFACE,
    )


def default_mocks(
    config: Optional[HarnessConfig] = None,
    recorder: Optional[NavigationRecorder] = None,
) -> List[MockModuleSpec]:
    """Build the standard ambient module mocks.

    Args:
        config: Source of flag values and the initial page URL. Defaults
            to an all-defaults configuration.
        recorder: Receives navigation-api calls. A fresh one if None.
    """
    if config is None:
        config = HarnessConfig.from_dict({})
    if recorder is None:
        recorder = NavigationRecorder()
    return [environment_mock(config), navigation_mock(recorder), stores_mock(config)]


def install_default_registry(
    config: Optional[HarnessConfig] = None,
    recorder: Optional[NavigationRecorder] = None,
    extra: Optional[List[MockModuleSpec]] = None,
) -> RuntimeServices:
    """Register the default mocks (plus ``extra``), freeze, and wrap in services.

    Specs in ``extra`` replace defaults of the same name.
    """
    registry = MockRegistry()
    for spec in default_mocks(config, recorder):
        registry.register_spec(spec)
    for spec in extra or []:
        registry.register_spec(spec)
    registry.freeze()
    logger.info(f"Installed runtime module mocks: {', '.join(registry.names())}")
    return RuntimeServices(registry)
