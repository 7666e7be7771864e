# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Adapters wiring descriptors onto the real component runtime.

TreeMounter walks a descriptor tree and mounts it under a host component:
- static props go to the component constructor
- bound props subscribe to their store after construction; the child ->
  store direction goes through Component.bind(); unsubscribe runs when
  the child is destroyed
- event bindings use Component.on() for components and
  Node.add_event_listener() for elements
- directives are queued in source order (open tags, pre-order) and
  attached once the host is mounted, or, for trees mounted later (slots
  rendered on update), once the outermost mount() call has built them;
  teardowns run on host destroy in attachment order, exactly once
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

from .descriptor import (
    ComponentInstantiationDescriptor,
    DirectiveBinding,
    ElementDescriptor,
    NodeDescriptor,
    TextDescriptor,
)
from .dom import Element, Node, Text
from .errors import BindingWireError
from .runtime import Component, SlotRenderer
from .stores import get

logger = logging.getLogger(__name__)


def _action_name(action: Callable[..., Any]) -> str:
    return getattr(action, "__name__", repr(action))


class DirectiveAttachment:
    """One directive on one node: attaches once, tears down once."""

    def __init__(self, binding: DirectiveBinding, resolve_node: Callable[[], Element]):
        self.binding = binding
        self._resolve_node = resolve_node
        self.node: Optional[Element] = None
        self.attached = False
        self.torn_down = False
        self._teardown: Optional[Callable[[], Any]] = None

    @property
    def name(self) -> str:
        return _action_name(self.binding.action)

    def attach(self) -> None:
        """Invoke the directive with its node (and params, if given)."""
        if self.attached:
            return
        self.node = self._resolve_node()
        self.attached = True

        if self.binding.has_params:
            result = self.binding.action(self.node, self.binding.params)
        else:
            result = self.binding.action(self.node)
        self._teardown = _teardown_of(result)
        logger.debug(f"Attached directive '{self.name}' to <{self.node.tag}>")

    def teardown(self) -> None:
        if not self.attached or self.torn_down:
            return
        self.torn_down = True
        if self._teardown is not None:
            self._teardown()
        logger.debug(f"Tore down directive '{self.name}'")


def _teardown_of(result: Any) -> Optional[Callable[[], Any]]:
    """Accept a bare teardown callable or an object/dict with ``destroy``."""
    if result is None:
        return None
    if callable(result):
        return result
    if isinstance(result, dict):
        destroy = result.get("destroy")
    else:
        destroy = getattr(result, "destroy", None)
    if destroy is not None and not callable(destroy):
        raise BindingWireError("use:", result, "a directive returning a callable teardown")
    return destroy


class TreeMounter:
    """Mounts descriptor trees for one host component."""

    def __init__(self, host: Component):
        self.host = host
        self.instances: List[Component] = []
        self.attachments: List[DirectiveAttachment] = []
        self._queue: List[DirectiveAttachment] = []
        self._host_mounted = False
        self._depth = 0
        host.on_mount(self._attach_queued)
        host.on_destroy(self._teardown_all)

    def mount(
        self,
        nodes: Tuple[NodeDescriptor, ...],
        parent: Node,
        owner: Component,
        anchor: Optional[Node] = None,
    ) -> List[Node]:
        """Mount nodes into parent before anchor.

        Returns:
            The top-level DOM nodes created.
        """
        created: List[Node] = []
        self._depth += 1
        try:
            for node in nodes:
                if isinstance(node, TextDescriptor):
                    text = Text(node.text)
                    parent.insert_before(text, anchor)
                    created.append(text)
                elif isinstance(node, ElementDescriptor):
                    created.append(self._mount_element(node, parent, owner, anchor))
                else:
                    created.extend(self._mount_component(node, parent, owner, anchor))
        finally:
            self._depth -= 1

        # Component roots only exist once mount_child has returned
        if self._depth == 0 and self._host_mounted:
            self._drain_queue()
        return created

    # Directives -----------------------------------------------------------

    def _queue_directives(
        self, bindings: List[DirectiveBinding], resolve_node: Callable[[], Element]
    ) -> None:
        for binding in bindings:
            attachment = DirectiveAttachment(binding, resolve_node)
            self.attachments.append(attachment)
            self._queue.append(attachment)

    def _attach_queued(self) -> None:
        self._host_mounted = True
        self._drain_queue()

    def _drain_queue(self) -> None:
        queue, self._queue = self._queue, []
        for attachment in queue:
            attachment.attach()

    def _teardown_all(self) -> None:
        errors: List[Exception] = []
        for attachment in self.attachments:
            try:
                attachment.teardown()
            except Exception as e:
                logger.error(f"Teardown of directive '{attachment.name}' failed: {e}")
                errors.append(e)
        if errors:
            raise errors[0]

    # Elements -------------------------------------------------------------

    def _mount_element(
        self,
        descriptor: ElementDescriptor,
        parent: Node,
        owner: Component,
        anchor: Optional[Node],
    ) -> Element:
        element = Element(descriptor.tag, descriptor.attributes)
        parent.insert_before(element, anchor)
        self._queue_directives(descriptor.directive_bindings, lambda: element)

        for event, handler in descriptor.event_bindings.items():
            owner.on_destroy(element.add_event_listener(event, handler))
        for name, store in descriptor.bound_props.items():
            self._bind_element(element, name, store, owner)

        self.mount(descriptor.children, element, owner)
        return element

    def _bind_element(self, element: Element, name: str, store: Any, owner: Component) -> None:
        if name == "this":
            store.set(element)
            return

        if name == "checked":

            def write_checked(value: Any) -> None:
                element.checked = bool(value)

            unsubscribe = store.subscribe(write_checked)
            remove = element.add_event_listener("change", lambda event: store.set(element.checked))
        else:

            def write_value(value: Any) -> None:
                element.value = "" if value is None else str(value)

            unsubscribe = store.subscribe(write_value)
            remove = element.add_event_listener("input", lambda event: store.set(element.value))

        owner.on_destroy(unsubscribe)
        owner.on_destroy(remove)

    # Components -----------------------------------------------------------

    def _mount_component(
        self,
        descriptor: ComponentInstantiationDescriptor,
        parent: Node,
        owner: Component,
        anchor: Optional[Node],
    ) -> List[Node]:
        props = dict(descriptor.static_props)
        for name, store in descriptor.bound_props.items():
            if name != "this":
                props[name] = get(store)

        slots = {
            name: (None if content is None else self._slot_renderer(content))
            for name, content in descriptor.slot_content.items()
        }

        # Queued before construction so attachment order follows source order
        instance: List[Component] = []

        def resolve_root() -> Element:
            root = instance[0].root_element
            if root is None:
                raise BindingWireError(
                    "use:", descriptor.component, "a component rendering at least one element"
                )
            return root

        self._queue_directives(descriptor.directive_bindings, resolve_root)

        # Components in this one's slots register while it is being built
        position = len(self.instances)
        child = owner.mount_child(descriptor.component, parent, props, slots=slots, anchor=anchor)
        instance.append(child)
        self.instances.insert(position, child)

        for event, handler in descriptor.event_bindings.items():
            child.on(event, handler)
        for name, store in descriptor.bound_props.items():
            self._bind_component(child, name, store)
        return list(child.nodes)

    def _bind_component(self, child: Component, name: str, store: Any) -> None:
        if name == "this":
            store.set(child)
            return

        # subscribe() replays the value the child was just constructed with
        subscribed = False

        def push_to_child(value: Any) -> None:
            if subscribed:
                child.set({name: value})

        unsubscribe = store.subscribe(push_to_child)
        subscribed = True
        child.bind(name, store.set)
        child.on_destroy(unsubscribe)
        logger.debug(f"Bound <{type(child).__name__}> prop '{name}' to {store!r}")

    def _slot_renderer(self, content: Tuple[NodeDescriptor, ...]) -> SlotRenderer:
        def render_slot(parent: Node, anchor: Optional[Node], owner: Component) -> List[Node]:
            return self.mount(content, parent, owner, anchor)

        return render_slot
