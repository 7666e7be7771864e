# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""DOM queries in the style users find elements by.

Each query family comes in four variants:
- query_all_by_*: list of matches (possibly empty)
- get_all_by_*: non-empty list, QueryError otherwise
- query_by_*: the single match or None, QueryError on several
- get_by_*: the single match, QueryError otherwise

Text matchers are a string (exact after whitespace normalisation, or a
case-insensitive substring with ``exact=False``), a compiled regex, or a
callable ``(text, element) -> bool``.
"""

import re
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple, Union

from .dom import Element, Node, Text

Matcher = Union[str, Pattern[str], Callable[[str, Element], bool]]
QueryAll = Callable[..., List[Element]]

_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_INPUT_ROLES = {
    "checkbox": "checkbox",
    "radio": "radio",
    "button": "button",
    "submit": "button",
    "reset": "button",
    "search": "searchbox",
    "range": "slider",
    "number": "spinbutton",
}
_TAG_ROLES = {
    "button": "button",
    "textarea": "textbox",
    "select": "combobox",
    "ul": "list",
    "ol": "list",
    "li": "listitem",
    "nav": "navigation",
    "main": "main",
    "dialog": "dialog",
    "img": "img",
    "form": "form",
    "table": "table",
}


class QueryError(AssertionError):
    """A query found no element, or more than one where one was expected."""

    pass


def normalize(text: str) -> str:
    return " ".join(text.split())


def matches(text: str, matcher: Matcher, element: Element, exact: bool = True) -> bool:
    text = normalize(text)
    if isinstance(matcher, str):
        if exact:
            return text == normalize(matcher)
        return normalize(matcher).lower() in text.lower()
    if isinstance(matcher, re.Pattern):
        return matcher.search(text) is not None
    return bool(matcher(text, element))


def elements(root: Node) -> List[Element]:
    return [node for node in root.iter_descendants() if isinstance(node, Element)]


def own_text(element: Element) -> str:
    """Text from the element's direct text children only."""
    return "".join(child.text_content for child in element.children if isinstance(child, Text))


def implicit_role(element: Element) -> Optional[str]:
    explicit = element.get_attribute("role")
    if explicit:
        return explicit.split()[0]
    tag = element.tag
    if tag == "input":
        return _INPUT_ROLES.get(element.get_attribute("type") or "text", "textbox")
    if tag == "a":
        return "link" if element.has_attribute("href") else None
    if tag in _HEADINGS:
        return "heading"
    return _TAG_ROLES.get(tag)


def _labels_for(element: Element) -> List[Element]:
    labels: List[Element] = []
    document = element.owner_document
    if document is not None and element.id:
        labels.extend(
            label
            for label in elements(document)
            if label.tag == "label" and label.get_attribute("for") == element.id
        )
    node = element.parent
    while node is not None:
        if isinstance(node, Element) and node.tag == "label":
            labels.append(node)
        node = node.parent
    return labels


def accessible_name(element: Element) -> str:
    label = element.get_attribute("aria-label")
    if label:
        return normalize(label)
    if element.tag in ("input", "textarea", "select"):
        labels = _labels_for(element)
        if labels:
            return normalize(" ".join(label.text_content for label in labels))
        return normalize(element.get_attribute("placeholder") or "")
    return normalize(element.text_content)


# Query families ------------------------------------------------------------


def query_all_by_text(root: Node, text: Matcher, exact: bool = True) -> List[Element]:
    return [
        element
        for element in elements(root)
        if element.tag not in ("script", "style")
        and matches(own_text(element), text, element, exact)
    ]


def query_all_by_role(
    root: Node, role: str, name: Optional[Matcher] = None, exact: bool = True
) -> List[Element]:
    found = [element for element in elements(root) if implicit_role(element) == role]
    if name is not None:
        found = [
            element for element in found if matches(accessible_name(element), name, element, exact)
        ]
    return found


def query_all_by_test_id(root: Node, test_id: Matcher, exact: bool = True) -> List[Element]:
    return [
        element
        for element in elements(root)
        if element.has_attribute("data-testid")
        and matches(element.get_attribute("data-testid") or "", test_id, element, exact)
    ]


def query_all_by_label_text(root: Node, text: Matcher, exact: bool = True) -> List[Element]:
    found: List[Element] = []
    for element in elements(root):
        if element.tag == "label" and matches(element.text_content, text, element, exact):
            target_id = element.get_attribute("for")
            if target_id:
                found.extend(e for e in elements(root) if e.id == target_id)
            else:
                found.extend(
                    e for e in elements(element) if e.tag in ("input", "textarea", "select")
                )
        elif element.has_attribute("aria-label") and matches(
            element.get_attribute("aria-label") or "", text, element, exact
        ):
            found.append(element)
    # Keep document order, drop duplicates
    return list(dict.fromkeys(found))


def _describe(root: Node) -> str:
    if isinstance(root, Element):
        markup = root.outer_html
    else:
        markup = "".join(e.outer_html for e in root.children if isinstance(e, Element))
    return markup if len(markup) <= 500 else markup[:500] + "..."


def _variants(
    query_all: QueryAll, label: str
) -> Tuple[QueryAll, Callable[..., Optional[Element]], Callable[..., Element]]:
    """Build get_all/query/get variants for one query_all function."""

    def get_all(root: Node, *args: Any, **kwargs: Any) -> List[Element]:
        found = query_all(root, *args, **kwargs)
        if not found:
            raise QueryError(f"Unable to find an element by {label}: {args!r}\n{_describe(root)}")
        return found

    def query(root: Node, *args: Any, **kwargs: Any) -> Optional[Element]:
        found = query_all(root, *args, **kwargs)
        if len(found) > 1:
            raise QueryError(
                f"Found {len(found)} elements by {label}: {args!r}; use the *_all_* variant"
            )
        return found[0] if found else None

    def get(root: Node, *args: Any, **kwargs: Any) -> Element:
        found = get_all(root, *args, **kwargs)
        if len(found) > 1:
            raise QueryError(
                f"Found {len(found)} elements by {label}: {args!r}; use the *_all_* variant"
            )
        return found[0]

    return get_all, query, get


get_all_by_text, query_by_text, get_by_text = _variants(query_all_by_text, "text")
get_all_by_role, query_by_role, get_by_role = _variants(query_all_by_role, "role")
get_all_by_test_id, query_by_test_id, get_by_test_id = _variants(query_all_by_test_id, "test id")
get_all_by_label_text, query_by_label_text, get_by_label_text = _variants(
    query_all_by_label_text, "label text"
)

QUERIES: Dict[str, Callable[..., Any]] = {
    name: value
    for name, value in list(globals().items())
    if name.startswith(("query_all_by_", "get_all_by_", "query_by_", "get_by_"))
}


class BoundQueries:
    """All queries with ``root`` pre-bound, as attributes."""

    def __init__(self, root: Node):
        self._root = root
        for name, query in QUERIES.items():
            setattr(self, name, partial(query, root))


def within(root: Node) -> BoundQueries:
    return BoundQueries(root)
