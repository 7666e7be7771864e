# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Registry of mocked ambient runtime modules.

Ambient runtime modules (environment flags, navigation, page stores) only
exist inside a bootstrapped application. Components never import them
directly; they declare what they need and receive it from an injected
RuntimeServices object backed by a MockRegistry.

Design:
- Modules are registered once per test run, then the registry is frozen
- Mocked names never invoke a real module loader
- Asking for a symbol a mock does not provide raises MockResolutionError
  instead of handing back None

Thread Safety:
- NOT thread-safe: register everything before tests start mounting
"""

import logging
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import HarnessError, MockResolutionError

logger = logging.getLogger(__name__)


@dataclass
class MockModuleSpec:
    """Substitute for one ambient runtime module.

    Attributes:
        name: Module identifier (e.g. "environment-flags").
        symbols: Exported symbol name -> deterministic implementation.
        surface: Symbol names the real module exports, when known.
    """

    name: str
    symbols: Dict[str, Any]
    surface: Optional[Tuple[str, ...]] = None

    def uncovered(self) -> Tuple[str, ...]:
        """Surface symbols without a substitute."""
        if self.surface is None:
            return ()
        return tuple(symbol for symbol in self.surface if symbol not in self.symbols)


class MockedModule:
    """Read-only module object handed to consuming code."""

    def __init__(self, spec: MockModuleSpec):
        object.__setattr__(self, "_spec", spec)

    def __getattr__(self, symbol: str) -> Any:
        if symbol.startswith("__"):
            raise AttributeError(symbol)
        try:
            return self._spec.symbols[symbol]
        except KeyError:
            raise MockResolutionError(self._spec.name, symbol) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise HarnessError(
            f"Mocked module '{self._spec.name}' is read-only; "
            "change behaviour through its store stubs instead"
        )

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._spec.symbols

    def __dir__(self) -> List[str]:
        return sorted(self._spec.symbols)

    def __repr__(self) -> str:
        return f"<MockedModule {self._spec.name} ({len(self._spec.symbols)} symbols)>"


class MockRegistry:
    """Module name -> mock spec, plus optional loaders for real modules."""

    def __init__(self) -> None:
        self._specs: Dict[str, MockModuleSpec] = {}
        self._modules: Dict[str, MockedModule] = {}
        self._real_loaders: Dict[str, Callable[[], Any]] = {}
        self._real_modules: Dict[str, Any] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        symbols: Mapping[str, Any],
        surface: Optional[Iterable[str]] = None,
    ) -> MockModuleSpec:
        """Register a mock for module ``name``.

        Args:
            name: Module identifier.
            symbols: Symbol name -> substitute.
            surface: Symbol names the real module exports. Any left without
                a substitute are logged; consuming them fails at resolution.

        Returns:
            The registered spec.

        Raises:
            HarnessError: If the registry is frozen.
            TypeError: If symbols is not a mapping.
        """
        self._check_writable(name)
        if not isinstance(symbols, Mapping):
            raise TypeError(f"Mock symbols for '{name}' must be a mapping, got {type(symbols)}")

        spec = MockModuleSpec(
            name=name,
            symbols=dict(symbols),
            surface=tuple(surface) if surface is not None else None,
        )
        if name in self._specs:
            logger.warning(f"Replacing existing mock for runtime module '{name}'")
        self._specs[name] = spec
        self._modules[name] = MockedModule(spec)

        missing = spec.uncovered()
        if missing:
            logger.warning(f"Mock for '{name}' leaves symbols unmocked: {', '.join(missing)}")
        logger.debug(f"Registered mock for '{name}' with {len(spec.symbols)} symbols")
        return spec

    def register_spec(self, spec: MockModuleSpec) -> MockModuleSpec:
        return self.register(spec.name, spec.symbols, spec.surface)

    def declare_real(self, name: str, loader: Callable[[], Any]) -> None:
        """Register a loader for the real module, used only when unmocked."""
        self._check_writable(name)
        self._real_loaders[name] = loader

    def _check_writable(self, name: str) -> None:
        if self._frozen:
            raise HarnessError(
                f"Cannot register '{name}': the mock registry is installed for the whole "
                "test run and cannot be reconfigured"
            )

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, name: str) -> Any:
        """Return the module object for ``name``.

        Raises:
            MockResolutionError: If name is neither mocked nor has a real loader.
        """
        if name in self._modules:
            return self._modules[name]

        if name in self._real_loaders:
            if name not in self._real_modules:
                logger.warning(f"Runtime module '{name}' is not mocked, loading real module")
                self._real_modules[name] = self._real_loaders[name]()
            return self._real_modules[name]

        raise MockResolutionError(name)

    def uncovered(self, name: str) -> Tuple[str, ...]:
        if name not in self._specs:
            raise MockResolutionError(name)
        return self._specs[name].uncovered()

    def names(self) -> List[str]:
        return sorted(self._specs)

    def count(self) -> int:
        return len(self._specs)

    def clear(self) -> None:
        """Remove all registrations. Only allowed before freezing."""
        self._check_writable("*")
        self._specs.clear()
        self._modules.clear()
        self._real_loaders.clear()
        self._real_modules.clear()


class RuntimeServices:
    """Capability object through which components reach ambient modules."""

    def __init__(self, registry: MockRegistry):
        self.registry = registry

    @classmethod
    def empty(cls) -> "RuntimeServices":
        registry = MockRegistry()
        registry.freeze()
        return cls(registry)

    def module(self, name: str) -> Any:
        return self.registry.resolve(name)

    def import_symbols(self, imports: Mapping[str, Iterable[str]]) -> Dict[str, SimpleNamespace]:
        """Resolve ``{module: (symbol, ...)}`` into namespaces keyed by module.

        Raises:
            MockResolutionError: On the first module or symbol that cannot
                be resolved.
        """
        resolved: Dict[str, SimpleNamespace] = {}
        for module_name, symbols in imports.items():
            module = self.module(module_name)
            values: Dict[str, Any] = {}
            for symbol in symbols:
                try:
                    values[symbol] = getattr(module, symbol)
                except AttributeError:
                    raise MockResolutionError(module_name, symbol, "real module") from None
            resolved[module_name] = SimpleNamespace(**values)
        return resolved
