# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Instantiation descriptors produced by the template parser and builders.

A parsed inline template is a tuple of nodes:
- TextDescriptor: literal text
- ElementDescriptor: a literal DOM tag
- ComponentInstantiationDescriptor: a component reference

Attributes are classified by prefix when added (see ``add_attribute``):
``bind:name`` -> bound prop, ``on:name`` -> event binding,
``use:`` -> directive, anything else -> static prop/attribute.

Invariants:
- a name appears in at most one of static props and bound props
- directive bindings keep source order (attachment runs in that order)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .errors import BindingWireError, TemplateParseError
from .runtime import Component
from .stores import is_store, is_writable

BIND_PREFIX = "bind:"
ON_PREFIX = "on:"
USE_PREFIX = "use:"

# Element properties that support bind:
ELEMENT_BINDINGS = ("value", "checked", "this")


@dataclass(frozen=True)
class DirectiveBinding:
    """One ``use:`` attachment: the action and its optional params."""

    action: Callable[..., Any]
    params: Any = None
    has_params: bool = False


@dataclass
class TextDescriptor:
    text: str


class _AttributeTarget:
    """Shared attribute classification for element and component tags."""

    static_props: Dict[str, Any]
    bound_props: Dict[str, Any]
    event_bindings: Dict[str, Callable[..., Any]]
    directive_bindings: List[DirectiveBinding]

    def add_attribute(self, name: str, value: Any) -> None:
        """Classify and store one attribute by its syntactic prefix.

        Raises:
            TemplateParseError: For a malformed prefix or duplicate name.
            BindingWireError: For a value of the wrong kind.
        """
        if name.startswith(BIND_PREFIX):
            self.add_binding(name[len(BIND_PREFIX) :], value)
        elif name.startswith(ON_PREFIX):
            self.add_event(name[len(ON_PREFIX) :], value)
        elif name.startswith(USE_PREFIX):
            raise TemplateParseError(f"'{name}': use: takes an interpolated function, not a name")
        elif ":" in name:
            raise TemplateParseError(f"Unsupported attribute prefix in '{name}'")
        else:
            self.add_static(name, value)

    def add_static(self, name: str, value: Any) -> None:
        if not name:
            raise TemplateParseError("Empty attribute name")
        if name in self.static_props or name in self.bound_props:
            raise TemplateParseError(f"Attribute '{name}' given more than once")
        self.static_props[name] = value

    def add_binding(self, name: str, store: Any) -> None:
        if not name:
            raise TemplateParseError("Malformed 'bind:' attribute: missing prop name")
        if name in self.static_props or name in self.bound_props:
            raise TemplateParseError(f"Prop '{name}' is both bound and given more than once")
        if name == "this":
            if not is_writable(store):
                raise BindingWireError(f"bind:{name}", store, "a writable store")
        elif not is_store(store):
            raise BindingWireError(f"bind:{name}", store, "a store with subscribe()")
        elif not is_writable(store):
            raise BindingWireError(f"bind:{name}", store, "a writable store with set()")
        self.bound_props[name] = store

    def add_event(self, name: str, handler: Any) -> None:
        if not name:
            raise TemplateParseError("Malformed 'on:' attribute: missing event name")
        if name in self.event_bindings:
            raise TemplateParseError(f"Event 'on:{name}' bound more than once on one tag")
        if not callable(handler):
            raise BindingWireError(f"on:{name}", handler, "a callable handler")
        self.event_bindings[name] = handler

    def add_directive(self, action: Any, params: Any = None, has_params: bool = False) -> None:
        if not callable(action):
            raise BindingWireError("use:", action, "a callable directive")
        self.directive_bindings.append(DirectiveBinding(action, params, has_params))


@dataclass
class ElementDescriptor(_AttributeTarget):
    """A literal DOM tag with its wiring and children."""

    tag: str
    static_props: Dict[str, Any] = field(default_factory=dict)
    bound_props: Dict[str, Any] = field(default_factory=dict)
    event_bindings: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    directive_bindings: List[DirectiveBinding] = field(default_factory=list)
    children: Tuple["NodeDescriptor", ...] = ()

    def add_binding(self, name: str, store: Any) -> None:
        if name and name not in ELEMENT_BINDINGS:
            raise TemplateParseError(
                f"<{self.tag}> supports bind: only for {', '.join(ELEMENT_BINDINGS)}, got '{name}'"
            )
        super().add_binding(name, store)

    @property
    def attributes(self) -> Dict[str, Any]:
        return self.static_props


@dataclass
class ComponentInstantiationDescriptor(_AttributeTarget):
    """Everything needed to instantiate one component reference."""

    component: type
    static_props: Dict[str, Any] = field(default_factory=dict)
    bound_props: Dict[str, Any] = field(default_factory=dict)
    event_bindings: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    directive_bindings: List[DirectiveBinding] = field(default_factory=list)
    slot_content: Dict[str, Optional[Tuple["NodeDescriptor", ...]]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not (isinstance(self.component, type) and issubclass(self.component, Component)):
            raise TemplateParseError(
                f"Component reference must be a Component subclass, got {self.component!r}"
            )

    @property
    def name(self) -> str:
        return self.component.__name__

    def add_slot(self, name: str, content: Optional[Tuple["NodeDescriptor", ...]]) -> None:
        if name in self.slot_content:
            raise TemplateParseError(f"Slot '{name}' of <{self.name}> given more than once")
        self.slot_content[name] = content


NodeDescriptor = Union[TextDescriptor, ElementDescriptor, ComponentInstantiationDescriptor]


def iter_components(nodes: Tuple[NodeDescriptor, ...]) -> List[ComponentInstantiationDescriptor]:
    """All component descriptors in a tree, in source order."""
    found: List[ComponentInstantiationDescriptor] = []
    for node in nodes:
        if isinstance(node, ComponentInstantiationDescriptor):
            found.append(node)
            for content in node.slot_content.values():
                found.extend(iter_components(content or ()))
        elif isinstance(node, ElementDescriptor):
            found.extend(iter_components(node.children))
    return found
