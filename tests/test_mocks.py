# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for the runtime module mock registry."""

import logging
from unittest.mock import Mock

import pytest

from component_harness.errors import HarnessError, MockResolutionError
from component_harness.mocks import MockModuleSpec, MockRegistry, RuntimeServices


class TestRegistration:
    """Tests for registering mocks."""

    def test_register_and_resolve(self):
        registry = MockRegistry()
        registry.register("flags", {"dev": True})

        module = registry.resolve("flags")

        assert module.dev is True
        assert "dev" in module
        assert dir(module) == ["dev"]
        assert registry.names() == ["flags"]
        assert registry.count() == 1

    def test_register_rejects_non_mapping(self):
        registry = MockRegistry()
        with pytest.raises(TypeError, match="must be a mapping"):
            registry.register("flags", [("dev", True)])

    def test_replacing_a_mock_warns(self, caplog):
        registry = MockRegistry()
        registry.register("flags", {"dev": True})

        with caplog.at_level(logging.WARNING):
            registry.register("flags", {"dev": False})

        assert "Replacing existing mock" in caplog.text
        assert registry.resolve("flags").dev is False

    def test_uncovered_surface_is_reported(self, caplog):
        registry = MockRegistry()

        with caplog.at_level(logging.WARNING):
            registry.register("flags", {"dev": True}, surface=("dev", "browser"))

        assert registry.uncovered("flags") == ("browser",)
        assert "browser" in caplog.text

    def test_register_spec(self):
        registry = MockRegistry()
        spec = MockModuleSpec("flags", {"dev": True}, surface=("dev",))

        registered = registry.register_spec(spec)

        assert registered.uncovered() == ()
        assert registry.resolve("flags").dev is True

    def test_frozen_registry_rejects_changes(self):
        registry = MockRegistry()
        registry.register("flags", {"dev": True})
        registry.freeze()

        assert registry.frozen
        with pytest.raises(HarnessError, match="cannot be reconfigured"):
            registry.register("flags", {"dev": False})
        with pytest.raises(HarnessError):
            registry.declare_real("other", Mock())
        with pytest.raises(HarnessError):
            registry.clear()

    def test_clear_before_freeze(self):
        registry = MockRegistry()
        registry.register("flags", {})
        registry.clear()
        assert registry.count() == 0


class TestResolution:
    """Tests for symbol and module resolution."""

    def test_missing_symbol_raises_instead_of_none(self):
        registry = MockRegistry()
        registry.register("flags", {"dev": True})
        module = registry.resolve("flags")

        with pytest.raises(MockResolutionError) as exc_info:
            module.browser

        assert exc_info.value.module == "flags"
        assert exc_info.value.symbol == "browser"
        assert isinstance(exc_info.value, ImportError)

    def test_unknown_module_raises(self):
        with pytest.raises(MockResolutionError, match="No mock registered for runtime module"):
            MockRegistry().resolve("nowhere")

    def test_mocked_module_is_read_only(self):
        registry = MockRegistry()
        registry.register("flags", {"dev": True})
        module = registry.resolve("flags")

        with pytest.raises(HarnessError, match="read-only"):
            module.dev = False

    def test_mocked_name_never_runs_real_loader(self):
        registry = MockRegistry()
        loader = Mock(side_effect=AssertionError("real module loaded"))
        registry.declare_real("navigation", loader)
        registry.register("navigation", {"goto": Mock()})

        registry.resolve("navigation").goto("/")

        loader.assert_not_called()

    def test_real_loader_used_once_when_unmocked(self, caplog):
        registry = MockRegistry()
        real = object()
        loader = Mock(return_value=real)
        registry.declare_real("analytics", loader)

        with caplog.at_level(logging.WARNING):
            assert registry.resolve("analytics") is real
            assert registry.resolve("analytics") is real

        loader.assert_called_once()
        assert "not mocked" in caplog.text


class TestRuntimeServices:
    """Tests for the injected services object."""

    def test_import_symbols(self):
        registry = MockRegistry()
        registry.register("flags", {"dev": True, "browser": False})
        services = RuntimeServices(registry)

        modules = services.import_symbols({"flags": ("dev", "browser")})

        assert modules["flags"].dev is True
        assert modules["flags"].browser is False

    def test_import_symbols_missing_symbol(self):
        registry = MockRegistry()
        registry.register("flags", {"dev": True})
        services = RuntimeServices(registry)

        with pytest.raises(MockResolutionError, match="does not provide symbol 'version'"):
            services.import_symbols({"flags": ("dev", "version")})

    def test_import_symbols_from_real_module_missing_attribute(self):
        registry = MockRegistry()
        registry.declare_real("real", lambda: object())
        services = RuntimeServices(registry)

        with pytest.raises(MockResolutionError, match="real module"):
            services.import_symbols({"real": ("anything",)})

    def test_empty_services_resolve_nothing(self):
        services = RuntimeServices.empty()

        assert services.registry.frozen
        assert services.import_symbols({}) == {}
        with pytest.raises(MockResolutionError):
            services.module("flags")
