# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Directives (use: actions) for tests."""

from typing import Any, Callable, Dict, List, Optional

from component_harness.dom import CustomEvent, Element, Event


def click_outside(node: Element) -> Dict[str, Callable[[], None]]:
    """Dispatch ``outside_click`` on node for document clicks outside it."""
    document = node.owner_document
    if document is None:
        raise RuntimeError("click_outside needs a node attached to a document")

    def handle(event: Event) -> None:
        if not node.contains(event.target):
            node.dispatch_event(CustomEvent("outside_click", detail=event.target))

    return {"destroy": document.add_event_listener("click", handle)}


def track(log: List[Any]) -> Callable[..., Callable[[], None]]:
    """Directive factory recording attach/teardown order in log."""

    def tracked(node: Element, params: Optional[Any] = None) -> Callable[[], None]:
        label = params if params is not None else node.tag
        log.append(("attach", label, node.owner_document is not None))

        def teardown() -> None:
            log.append(("teardown", label))

        return teardown

    return tracked
