# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Minimal in-memory DOM for mounting components under test.

Only what component tests observe is modelled:
- a node tree with insertion, removal and containment checks
- element attributes plus the form properties value/checked/disabled
- event listeners with capture-free bubbling dispatch
- focus tracking on the owning document

There is no layout, styling or HTML serialisation beyond ``outer_html``
(used in error messages and debugging).
"""

import html
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[["Event"], Any]

# Elements without a closing tag in outer_html
VOID_TAGS = frozenset({"br", "hr", "img", "input", "meta", "link"})


class Event:
    """A DOM event travelling from its target up to the document."""

    def __init__(self, type: str, bubbles: bool = True, cancelable: bool = True, **init: Any):
        self.type = type
        self.bubbles = bubbles
        self.cancelable = cancelable
        self.target: Optional["Node"] = None
        self.current_target: Optional["Node"] = None
        self.default_prevented = False
        self.propagation_stopped = False
        # Extra init fields (key, button, ...) become attributes
        for name, value in init.items():
            setattr(self, name, value)

    def prevent_default(self) -> None:
        if self.cancelable:
            self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type!r})"


class CustomEvent(Event):
    """Event carrying an arbitrary ``detail`` payload."""

    def __init__(self, type: str, detail: Any = None, bubbles: bool = False, **init: Any):
        super().__init__(type, bubbles=bubbles, **init)
        self.detail = detail


class Node:
    """Base node: tree structure and event listeners."""

    def __init__(self) -> None:
        self.parent: Optional["Node"] = None
        self.children: List["Node"] = []
        self._owner: Optional["Document"] = None
        self._listeners: Dict[str, List[Listener]] = {}

    # Tree -----------------------------------------------------------------

    @property
    def owner_document(self) -> Optional["Document"]:
        return self._owner

    def append_child(self, child: "Node") -> "Node":
        return self.insert_before(child, None)

    def insert_before(self, child: "Node", anchor: Optional["Node"]) -> "Node":
        """Insert child before anchor (append when anchor is None).

        Raises:
            ValueError: If anchor is not a child of this node, or child is an
                ancestor of this node.
        """
        if child is self or child.contains(self):
            raise ValueError("Cannot insert a node into its own subtree")
        if child.parent is not None:
            child.parent.remove_child(child)

        if anchor is None:
            self.children.append(child)
        else:
            if anchor.parent is not self:
                raise ValueError("Anchor node is not a child of this node")
            self.children.insert(self.children.index(anchor), child)

        child.parent = self
        child._adopt(self._owner)
        return child

    def remove_child(self, child: "Node") -> "Node":
        if child.parent is not self:
            raise ValueError("Node is not a child of this node")
        self.children.remove(child)
        child.parent = None
        return child

    def remove(self) -> None:
        """Detach this node from its parent. No-op when already detached."""
        if self.parent is not None:
            self.parent.remove_child(self)

    def contains(self, other: Optional["Node"]) -> bool:
        """Whether other is this node or one of its descendants."""
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def _adopt(self, owner: Optional["Document"]) -> None:
        self._owner = owner
        for child in self.children:
            child._adopt(owner)

    def iter_descendants(self) -> Iterator["Node"]:
        """Depth-first, document-order iteration (excluding self)."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.children)

    @text_content.setter
    def text_content(self, value: str) -> None:
        for child in list(self.children):
            self.remove_child(child)
        if value:
            self.append_child(Text(str(value)))

    # Events ---------------------------------------------------------------

    def add_event_listener(self, type: str, listener: Listener) -> Callable[[], None]:
        """Attach a listener.

        Returns:
            Callable that removes this listener again.
        """
        self._listeners.setdefault(type, []).append(listener)

        def remove() -> None:
            self.remove_event_listener(type, listener)

        return remove

    def remove_event_listener(self, type: str, listener: Listener) -> None:
        listeners = self._listeners.get(type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, type: str) -> int:
        return len(self._listeners.get(type, []))

    def dispatch_event(self, event: Event) -> bool:
        """Dispatch event at this node, bubbling to ancestors if it bubbles.

        Returns:
            False if a listener called prevent_default(), True otherwise.
        """
        event.target = self
        path: List[Node] = [self]
        if event.bubbles:
            node = self.parent
            while node is not None:
                path.append(node)
                node = node.parent

        for node in path:
            event.current_target = node
            for listener in list(node._listeners.get(event.type, [])):
                listener(event)
            if event.propagation_stopped:
                break

        event.current_target = None
        return not event.default_prevented


class Text(Node):
    """Text node."""

    def __init__(self, data: str = ""):
        super().__init__()
        self.data = data

    @property
    def text_content(self) -> str:
        return self.data

    @text_content.setter
    def text_content(self, value: str) -> None:
        self.data = str(value)

    def __repr__(self) -> str:
        return f"Text({self.data!r})"


class Element(Node):
    """Element node with attributes and form properties."""

    def __init__(self, tag: str, attributes: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.tag = tag.lower()
        self.attributes: Dict[str, str] = {}
        self.value = ""
        self.checked = False
        for name, value in (attributes or {}).items():
            self.set_attribute(name, value)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute. False/None remove it, True sets an empty value.

        ``value`` and ``checked`` also initialise the matching property.
        """
        if value is None or value is False:
            self.remove_attribute(name)
            return
        text = "" if value is True else str(value)
        self.attributes[name] = text
        if name == "value":
            self.value = text
        elif name == "checked":
            self.checked = True

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)
        if name == "checked":
            self.checked = False

    @property
    def disabled(self) -> bool:
        return "disabled" in self.attributes

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self.set_attribute("disabled", bool(value))

    @property
    def id(self) -> Optional[str]:
        return self.attributes.get("id")

    def focus(self) -> None:
        if self._owner is not None and not self.disabled:
            self._owner.active_element = self

    def blur(self) -> None:
        if self._owner is not None and self._owner.active_element is self:
            self._owner.active_element = None

    @property
    def outer_html(self) -> str:
        attrs = "".join(
            f' {name}="{html.escape(value, quote=True)}"' if value else f" {name}"
            for name, value in self.attributes.items()
        )
        if self.tag in VOID_TAGS:
            return f"<{self.tag}{attrs}>"
        inner = "".join(
            child.outer_html if isinstance(child, Element) else html.escape(child.text_content)
            for child in self.children
        )
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"

    def __repr__(self) -> str:
        return f"<Element {self.tag} {self.attributes!r}>"


class Document(Node):
    """Root of a DOM tree. Owns ``body`` and tracks the focused element."""

    def __init__(self) -> None:
        super().__init__()
        self._owner = self
        self.active_element: Optional[Element] = None
        self.body = Element("body")
        self.append_child(self.body)

    def create_element(self, tag: str, attributes: Optional[Dict[str, Any]] = None) -> Element:
        element = Element(tag, attributes)
        element._owner = self
        return element

    def create_text_node(self, data: str) -> Text:
        text = Text(data)
        text._owner = self
        return text

    def __repr__(self) -> str:
        return "<Document>"


def h(tag: str, attributes: Optional[Dict[str, Any]] = None, *children: Any) -> Element:
    """Build a detached element tree.

    Children may be nodes or plain values (converted to text nodes).

    Example:
        h("button", {"type": "button"}, "clear")
    """
    element = Element(tag, attributes)
    for child in children:
        if child is None:
            continue
        element.append_child(child if isinstance(child, Node) else Text(str(child)))
    return element
