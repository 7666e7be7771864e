# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Render entry points and the mounted-component handle.

``render`` is the single root instantiation path. ``render_inline`` and
``render_descriptor`` parse/build descriptors and then mount an InlineHost
component through ``render``, so bindings, directive order and slot
projection all pass through the real runtime.

Every handle is tracked until unmounted; ``cleanup()`` unmounts whatever
a test left behind.
"""

import logging
from typing import Any, Dict, List, Optional, Type, Union

from .adapters import TreeMounter
from .builder import to_node
from .descriptor import NodeDescriptor
from .dom import Document, Element, Node
from .mocks import RuntimeServices
from .queries import BoundQueries
from .runtime import Component, SlotRenderer, scheduler
from .template import TemplateFragment, as_fragment, parse_fragment

logger = logging.getLogger(__name__)

_mounted: List["MountedComponent"] = []


class InlineHost(Component):
    """Invisible wrapper that mounts descriptor trees."""

    defaults: Dict[str, Any] = {"nodes": ()}

    def setup(self) -> None:
        self.mounter = TreeMounter(self)

    def create(self) -> List[Node]:
        # Staging parent; its children move to the real target on insert
        staging = Element("template")
        self.mounter.mount(tuple(self.props["nodes"]), staging, self)
        return list(staging.children)

    @property
    def instances(self) -> List[Component]:
        """Components created from the template, in source order."""
        return list(self.mounter.instances)


class MountedComponent(BoundQueries):
    """Handle for a rendered component.

    Queries (``get_by_text`` etc.) are bound to ``container``.
    """

    def __init__(self, component: Component, container: Element, document: Document):
        super().__init__(container)
        self.component = component
        self.container = container
        self.document = document
        self.unmounted = False

    @property
    def instance(self) -> Component:
        """The component under test (the first template component for inline renders)."""
        if isinstance(self.component, InlineHost):
            instances = self.component.instances
            if not instances:
                raise LookupError("Inline template did not create any component")
            return instances[0]
        return self.component

    def instances_of(self, component_class: type) -> List[Component]:
        if isinstance(self.component, InlineHost):
            return [c for c in self.component.instances if isinstance(c, component_class)]
        return [self.component] if isinstance(self.component, component_class) else []

    def set(self, props: Dict[str, Any]) -> None:
        self.component.set(props)

    def flush(self) -> None:
        scheduler.flush()

    def html(self) -> str:
        return "".join(
            node.outer_html if isinstance(node, Element) else node.text_content
            for node in self.container.children
        )

    def unmount(self) -> None:
        """Destroy the component and detach its container. Idempotent."""
        if self.unmounted:
            return
        self.unmounted = True
        if self in _mounted:
            _mounted.remove(self)
        try:
            self.component.destroy()
        finally:
            self.container.remove()

    def __repr__(self) -> str:
        state = "unmounted" if self.unmounted else "mounted"
        return f"<MountedComponent {type(self.component).__name__} ({state})>"


def render(
    component_class: Type[Component],
    props: Optional[Dict[str, Any]] = None,
    *,
    services: Optional[RuntimeServices] = None,
    context: Optional[Dict[Any, Any]] = None,
    slots: Optional[Dict[str, Optional[SlotRenderer]]] = None,
    document: Optional[Document] = None,
) -> MountedComponent:
    """Mount a component into a fresh container in ``document.body``.

    Args:
        component_class: Component to instantiate.
        props: Initial props.
        services: Runtime services (mock registry) for ambient imports.
        context: Context visible to the component and its descendants.
        slots: Slot renderers, for components with slots.
        document: Document to mount into. A new one by default.

    Returns:
        Handle for queries, updates and unmounting.

    Raises:
        MockResolutionError: If the component imports an unmocked symbol.
    """
    document = document if document is not None else Document()
    container = document.create_element("div")
    document.body.append_child(container)

    try:
        component = component_class(
            container, props, services=services, context=context, slots=slots
        )
    except Exception:
        container.remove()
        raise

    handle = MountedComponent(component, container, document)
    _mounted.append(handle)
    logger.debug(f"Rendered <{component_class.__name__}>")
    return handle


def render_inline(
    template: Union[TemplateFragment, str],
    *values: Any,
    services: Optional[RuntimeServices] = None,
    context: Optional[Dict[Any, Any]] = None,
    document: Optional[Document] = None,
) -> MountedComponent:
    """Parse an inline template and mount it.

    Example:
        render_inline("<{} bind:value={} />", Keypad, store)

    Raises:
        TemplateParseError: For malformed templates.
        BindingWireError: For bind:/use:/on: values of the wrong kind.
    """
    nodes = parse_fragment(as_fragment(template, *values))
    return render(
        InlineHost, {"nodes": nodes}, services=services, context=context, document=document
    )


def render_descriptor(
    *content: Any,
    services: Optional[RuntimeServices] = None,
    context: Optional[Dict[Any, Any]] = None,
    document: Optional[Document] = None,
) -> MountedComponent:
    """Mount builders or descriptors (see component_harness.builder)."""
    nodes: List[NodeDescriptor] = [to_node(item) for item in content]
    return render(
        InlineHost, {"nodes": tuple(nodes)}, services=services, context=context, document=document
    )


def mounted() -> List[MountedComponent]:
    return list(_mounted)


def cleanup() -> None:
    """Unmount every handle still mounted, most recent first.

    A failing unmount does not stop the rest; the first error is re-raised
    once every handle is gone.
    """
    errors: List[Exception] = []
    for handle in reversed(list(_mounted)):
        try:
            handle.unmount()
        except Exception as e:
            logger.error(f"Unmounting {handle!r} failed: {e}")
            errors.append(e)
    _mounted.clear()
    if errors:
        raise errors[0]
