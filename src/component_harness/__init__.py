# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Test harness for interactive UI components."""

from .ambient import (
    AMBIENT_STORES,
    ENVIRONMENT_FLAGS,
    NAVIGATION_API,
    NavigationRecorder,
    PageState,
    default_mocks,
    install_default_registry,
)
from .builder import component, element
from .config import HarnessConfig
from .descriptor import ComponentInstantiationDescriptor, DirectiveBinding, ElementDescriptor
from .dom import CustomEvent, Document, Element, Event, Text, h
from .errors import BindingWireError, HarnessError, MockResolutionError, TemplateParseError
from .interaction import clear, click, dbl_click, fire_event, keyboard, type_text
from .mocks import MockModuleSpec, MockRegistry, RuntimeServices
from .queries import QueryError, within
from .render import MountedComponent, cleanup, render, render_descriptor, render_inline
from .runtime import Component, flush, tick
from .stores import ReadableStore, StaleFlagStore, WritableStore, get, readable, writable
from .template import TemplateFragment, html, inline, parse_fragment

__version__ = "0.1.0"

__all__ = [
    # Runtime
    "Component",
    "flush",
    "tick",
    "Document",
    "Element",
    "Text",
    "Event",
    "CustomEvent",
    "h",
    # Stores
    "ReadableStore",
    "WritableStore",
    "StaleFlagStore",
    "readable",
    "writable",
    "get",
    # Mock registry
    "MockModuleSpec",
    "MockRegistry",
    "RuntimeServices",
    "ENVIRONMENT_FLAGS",
    "NAVIGATION_API",
    "AMBIENT_STORES",
    "NavigationRecorder",
    "PageState",
    "default_mocks",
    "install_default_registry",
    # Inline templates
    "TemplateFragment",
    "html",
    "inline",
    "parse_fragment",
    "ComponentInstantiationDescriptor",
    "ElementDescriptor",
    "DirectiveBinding",
    "component",
    "element",
    # Rendering and interaction
    "render",
    "render_inline",
    "render_descriptor",
    "cleanup",
    "MountedComponent",
    "within",
    "click",
    "dbl_click",
    "type_text",
    "clear",
    "keyboard",
    "fire_event",
    # Configuration and errors
    "HarnessConfig",
    "HarnessError",
    "TemplateParseError",
    "MockResolutionError",
    "BindingWireError",
    "QueryError",
]
