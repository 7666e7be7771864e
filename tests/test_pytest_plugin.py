# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for the fixtures provided by the pytest plugin."""

import subprocess
import sys

import pytest

from component_harness.ambient import AMBIENT_STORES, NAVIGATION_API, PageState
from component_harness.errors import HarnessError
from component_harness.render import MountedComponent, mounted
from component_harness.runtime import scheduler
from component_harness.stores import get

from sample_components import Card


class TestPluginModule:
    def test_imports_in_a_fresh_interpreter(self):
        result = subprocess.run(
            [sys.executable, "-c", "import component_harness.pytest_plugin"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr

    def test_registered_through_entry_point(self, pytestconfig):
        assert pytestconfig.pluginmanager.hasplugin("component_harness")

    def test_render_fixture_returns_handle(self, render):
        assert isinstance(render(Card), MountedComponent)


class TestSessionFixtures:
    def test_runtime_services_are_frozen(self, runtime_services):
        assert runtime_services.registry.frozen
        with pytest.raises(HarnessError):
            runtime_services.registry.register("late", {})

    def test_runtime_services_are_shared(self, runtime_services, request):
        assert request.getfixturevalue("runtime_services") is runtime_services

    def test_tick_limit_follows_config(self, harness_config, runtime_services):
        assert scheduler.tick_limit == harness_config.tick_limit


class TestNavigationCalls:
    @pytest.mark.asyncio
    async def test_records_calls(self, runtime_services, navigation_calls):
        await runtime_services.module(NAVIGATION_API).invalidate_all()
        assert [call.name for call in navigation_calls.calls] == ["invalidate_all"]

    def test_starts_empty_each_test(self, navigation_calls):
        assert navigation_calls.calls == []


class TestPageStore:
    def test_page_store_is_the_mocked_store(self, runtime_services, page_store):
        assert runtime_services.module(AMBIENT_STORES).page is page_store

    def test_changes_page(self, page_store):
        page_store.set(PageState(url="http://localhost/changed"))
        assert get(page_store).url == "http://localhost/changed"

    def test_page_restored_after_previous_test(self, page_store, harness_config):
        assert get(page_store).url == harness_config.page_url


class TestCleanup:
    def test_render_leaves_component_mounted(self, render):
        render(Card)
        assert len(mounted()) == 1

    def test_previous_render_was_cleaned_up(self):
        assert mounted() == []
