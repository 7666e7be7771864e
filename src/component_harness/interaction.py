# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Simulated user interaction.

Each async helper dispatches the events a real gesture produces, then
awaits the scheduler tick, so the returned awaitable completes only after
queued reactive updates are flushed. Await every interaction before the
next one or before asserting.

``fire_event`` is the synchronous low-level escape hatch: one event, no tick.
"""

import logging
from typing import Any, Optional

from .dom import Document, Element, Event, Node
from .runtime import tick

logger = logging.getLogger(__name__)

_TEXT_INPUT_TAGS = ("input", "textarea")


def _require_element(node: Any) -> Element:
    if not isinstance(node, Element):
        raise TypeError(f"Expected an Element to interact with, got {type(node).__name__}")
    if node.owner_document is None or not node.owner_document.contains(node):
        raise ValueError(f"Cannot interact with a detached element: {node!r}")
    return node


def _closest(node: Optional[Node], tag: str) -> Optional[Element]:
    while node is not None:
        if isinstance(node, Element) and node.tag == tag:
            return node
        node = node.parent
    return None


def fire_event(node: Node, type: str, **init: Any) -> bool:
    """Dispatch a single bubbling event. Returns False if default was prevented."""
    return node.dispatch_event(Event(type, **init))


def _click(element: Element) -> None:
    if element.disabled:
        logger.debug(f"Ignoring click on disabled {element!r}")
        return

    fire_event(element, "pointerdown")
    fire_event(element, "mousedown", button=0)
    element.focus()
    fire_event(element, "pointerup")
    fire_event(element, "mouseup", button=0)

    input_type = element.get_attribute("type") if element.tag == "input" else None
    previous_checked = element.checked
    if input_type == "checkbox":
        element.checked = not element.checked
    elif input_type == "radio":
        element.checked = True

    if not fire_event(element, "click", button=0):
        # A cancelled click reverts the toggle
        element.checked = previous_checked
        return

    if input_type in ("checkbox", "radio") and element.checked != previous_checked:
        fire_event(element, "input")
        fire_event(element, "change")
        return

    button_type = element.get_attribute("type") or "submit"
    is_submit = (element.tag == "button" and button_type == "submit") or input_type == "submit"
    form = _closest(element, "form")
    if is_submit and form is not None:
        fire_event(form, "submit")


async def click(node: Node) -> None:
    """Press and release the primary button on node."""
    _click(_require_element(node))
    await tick()


async def dbl_click(node: Node) -> None:
    element = _require_element(node)
    _click(element)
    _click(element)
    if not element.disabled:
        fire_event(element, "dblclick", button=0)
    await tick()


async def type_text(node: Node, text: str) -> None:
    """Click into a text field and type text one character at a time."""
    element = _require_element(node)
    if element.tag not in _TEXT_INPUT_TAGS:
        raise ValueError(f"Cannot type into <{element.tag}>")
    _click(element)
    if element.disabled or element.has_attribute("readonly"):
        await tick()
        return

    for char in text:
        if not fire_event(element, "keydown", key=char):
            continue
        fire_event(element, "keypress", key=char)
        element.value += char
        fire_event(element, "input", data=char, input_type="insertText")
        fire_event(element, "keyup", key=char)
    await tick()


async def clear(node: Node) -> None:
    """Select everything in a text field and delete it."""
    element = _require_element(node)
    if element.tag not in _TEXT_INPUT_TAGS:
        raise ValueError(f"Cannot clear <{element.tag}>")
    if element.disabled or element.has_attribute("readonly"):
        await tick()
        return
    element.focus()
    element.value = ""
    fire_event(element, "input", data=None, input_type="deleteContentBackward")
    await tick()


async def keyboard(target: Node, key: str) -> None:
    """Press and release key on target.

    Passing the document sends the key to its focused element (or body).
    """
    if isinstance(target, Document):
        target = target.active_element or target.body

    if fire_event(target, "keydown", key=key) and key == "Enter":
        form = _closest(target, "form")
        if form is not None and isinstance(target, Element) and target.tag == "input":
            fire_event(form, "submit")
    fire_event(target, "keyup", key=key)
    await tick()
