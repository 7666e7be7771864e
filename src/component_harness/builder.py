# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Builder API producing the same descriptors as inline templates.

Use it when a template string is awkward, e.g. when props are computed:

    keypad = (
        component(Keypad)
        .bind("value", store)
        .on("submit", handler)
        .slot("footer", element("button").child("clear"))
    )
    render_descriptor(keypad)

Directives are kept in the order ``use()`` is called.
"""

from typing import Any, Callable, Tuple, Union

from .descriptor import (
    ComponentInstantiationDescriptor,
    ElementDescriptor,
    NodeDescriptor,
    TextDescriptor,
)

_NO_PARAMS = object()


class _Builder:
    """Shared wiring methods; subclasses own the descriptor."""

    _descriptor: Union[ElementDescriptor, ComponentInstantiationDescriptor]

    def bind(self, name: str, store: Any) -> "_Builder":
        self._descriptor.add_binding(name, store)
        return self

    def on(self, event: str, handler: Callable[..., Any]) -> "_Builder":
        self._descriptor.add_event(event, handler)
        return self

    def use(self, action: Callable[..., Any], params: Any = _NO_PARAMS) -> "_Builder":
        if params is _NO_PARAMS:
            self._descriptor.add_directive(action)
        else:
            self._descriptor.add_directive(action, params, has_params=True)
        return self

    def build(self) -> NodeDescriptor:
        return self._descriptor


class ComponentBuilder(_Builder):
    """Fluent construction of a ComponentInstantiationDescriptor."""

    def __init__(self, component_class: type):
        self._descriptor: ComponentInstantiationDescriptor = ComponentInstantiationDescriptor(
            component_class
        )

    def prop(self, name: str, value: Any) -> "ComponentBuilder":
        self._descriptor.add_static(name, value)
        return self

    def props(self, **values: Any) -> "ComponentBuilder":
        for name, value in values.items():
            self.prop(name, value)
        return self

    def slot(self, name: str = "default", *content: Any) -> "ComponentBuilder":
        """Give content for a slot. No content marks the slot as explicitly empty."""
        nodes = to_nodes(content)
        self._descriptor.add_slot(name, nodes or None)
        return self


class ElementBuilder(_Builder):
    """Fluent construction of an ElementDescriptor."""

    def __init__(self, tag: str, **attributes: Any):
        self._descriptor: ElementDescriptor = ElementDescriptor(tag)
        for name, value in attributes.items():
            self.attr(name, value)

    def attr(self, name: str, value: Any = True) -> "ElementBuilder":
        self._descriptor.add_static(name.rstrip("_"), value)
        return self

    def child(self, *content: Any) -> "ElementBuilder":
        self._descriptor.children = self._descriptor.children + to_nodes(content)
        return self


def component(component_class: type) -> ComponentBuilder:
    return ComponentBuilder(component_class)


def element(tag: str, **attributes: Any) -> ElementBuilder:
    """Start an element. Trailing underscores are stripped (``class_``)."""
    return ElementBuilder(tag, **attributes)


def to_node(item: Any) -> NodeDescriptor:
    """Accept builders, descriptors and plain text."""
    if isinstance(item, _Builder):
        return item.build()
    if isinstance(item, (TextDescriptor, ElementDescriptor, ComponentInstantiationDescriptor)):
        return item
    if isinstance(item, str):
        return TextDescriptor(item)
    raise TypeError(f"Cannot use {type(item).__name__} as template content")


def to_nodes(items: Any) -> Tuple[NodeDescriptor, ...]:
    return tuple(to_node(item) for item in items)
