# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for the default ambient module mocks."""

import pytest

from component_harness.ambient import (
    AMBIENT_STORES,
    ENVIRONMENT_FLAGS,
    NAVIGATION_API,
    NAVIGATION_SURFACE,
    NavigationRecorder,
    PageState,
    default_mocks,
    install_default_registry,
)
from component_harness.config import HarnessConfig
from component_harness.errors import HarnessError
from component_harness.mocks import MockModuleSpec
from component_harness.stores import get


class TestDefaultMocks:
    """Tests for the standard mock set."""

    def test_defaults_cover_every_surface(self):
        for spec in default_mocks():
            assert spec.uncovered() == (), spec.name

    def test_environment_flags_follow_config(self):
        config = HarnessConfig.from_dict({"env_dev": False, "app_version": "1.2.3"})
        services = install_default_registry(config)

        env = services.module(ENVIRONMENT_FLAGS)

        assert env.dev is False
        assert env.browser is True
        assert env.building is False
        assert env.version == "1.2.3"

    def test_page_store_starts_at_configured_url(self):
        config = HarnessConfig.from_dict({"page_url": "https://example.test/docs"})
        services = install_default_registry(config)

        page = get(services.module(AMBIENT_STORES).page)

        assert isinstance(page, PageState)
        assert page.url == "https://example.test/docs"
        assert page.status == 200

    def test_get_stores_returns_same_stores(self):
        stores = install_default_registry().module(AMBIENT_STORES)

        assert stores.get_stores()["page"] is stores.page
        assert get(stores.navigating) is None
        assert get(stores.updated) is False

    def test_installed_registry_is_frozen(self):
        services = install_default_registry()
        with pytest.raises(HarnessError):
            services.registry.register(ENVIRONMENT_FLAGS, {})

    def test_extra_specs_replace_defaults(self):
        services = install_default_registry(
            extra=[MockModuleSpec(ENVIRONMENT_FLAGS, {"dev": False, "browser": False})]
        )
        assert services.module(ENVIRONMENT_FLAGS).dev is False

    def test_page_state_with_changes(self):
        page = PageState()
        moved = page.with_changes(url="http://localhost/about", params={"id": "1"})

        assert page.url == "http://localhost/"
        assert moved.url == "http://localhost/about"
        assert moved.params == {"id": "1"}


class TestNavigationMock:
    """Tests for the recording navigation-api mock."""

    @pytest.mark.asyncio
    async def test_goto_records_and_resolves(self):
        recorder = NavigationRecorder()
        navigation = install_default_registry(recorder=recorder).module(NAVIGATION_API)

        result = await navigation.goto("/settings", replace_state=True)

        assert result is None
        assert len(recorder.calls) == 1
        call = recorder.calls[0]
        assert call.name == "goto"
        assert call.args == ("/settings",)
        assert call.kwargs == {"replace_state": True}

    @pytest.mark.asyncio
    async def test_preload_data_returns_loaded_result(self):
        recorder = NavigationRecorder()
        navigation = install_default_registry(recorder=recorder).module(NAVIGATION_API)

        result = await navigation.preload_data("/blog")

        assert result["type"] == "loaded"
        assert recorder.calls_to("preload_data")[0].args == ("/blog",)

    def test_sync_functions_record(self):
        recorder = NavigationRecorder()
        navigation = install_default_registry(recorder=recorder).module(NAVIGATION_API)

        navigation.before_navigate(lambda nav: None)
        navigation.push_state("", {"modal": True})
        navigation.disable_scroll_handling()

        assert [call.name for call in recorder.calls] == [
            "before_navigate",
            "push_state",
            "disable_scroll_handling",
        ]
        recorder.reset()
        assert recorder.calls == []

    def test_every_surface_function_is_named(self):
        navigation = install_default_registry().module(NAVIGATION_API)
        for name in NAVIGATION_SURFACE:
            assert getattr(navigation, name).__name__ == name
