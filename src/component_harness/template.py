# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Inline template mini-language.

A TemplateFragment is the pair (strings, values) a tagged-template call
produces: ``len(strings) == len(values) + 1`` and value ``i`` sits between
``strings[i]`` and ``strings[i + 1]``. Build one with ``html()`` from explicit
chunks or ``inline()`` from a str.format-style source:

    inline('<{} bind:value={} on:submit={}>'
           '<template slot="footer"><button>clear</button></template>'
           '</{}>', Keypad, store, handler, Keypad)

Grammar (holes written as {}):
- ``<name ...>`` literal element, ``<{} ...>`` component reference
- ``</name>`` / ``</{}>`` closes the innermost open tag; matched by tag text
  equality, or by identity for component references
- ``<tag ... />`` self-closes; void tags (input, br, ...) always do
- attribute values: ``={}``, ``="text {} text"``, ``=word``; bare names are True
- ``bind:name={}``, ``on:name={}``, ``use:{}`` and ``use:{}={}``
- ``<template slot="name">`` and ``slot="name"`` route component content
  into named slots; everything else lands in the default slot
- ``<!-- ... -->`` comments are dropped, as is whitespace-only text
- a TemplateFragment interpolated in text position is spliced in as nodes

Fragments are parsed on every call; nothing is cached.
"""

import logging
import string
from dataclasses import dataclass
from html import unescape
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .descriptor import (
    USE_PREFIX,
    ComponentInstantiationDescriptor,
    ElementDescriptor,
    NodeDescriptor,
    TextDescriptor,
)
from .dom import VOID_TAGS
from .errors import TemplateParseError

logger = logging.getLogger(__name__)

# Stands in for an interpolation hole inside the scanned source
HOLE = "\x00"

SLOT_MARKER_TAG = "template"
SLOT_ATTRIBUTE = "slot"
DEFAULT_SLOT = "default"

_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "-_:.")
_ATTR_END = frozenset(" \t\r\n=>/" + HOLE)


@dataclass(frozen=True)
class TemplateFragment:
    """Template chunks and the values interpolated between them."""

    strings: Tuple[str, ...]
    values: Tuple[Any, ...]

    def __post_init__(self) -> None:
        if len(self.strings) != len(self.values) + 1:
            raise TemplateParseError(
                f"Fragment needs exactly one more string than values, got "
                f"{len(self.strings)} strings and {len(self.values)} values"
            )

    @property
    def source(self) -> str:
        """Template text with holes shown as ``{}``."""
        return "{}".join(self.strings)


def html(strings: Sequence[str], *values: Any) -> TemplateFragment:
    """Build a fragment from explicit chunks (tagged-template call shape)."""
    return TemplateFragment(tuple(strings), tuple(values))


def inline(source: str, *values: Any) -> TemplateFragment:
    """Build a fragment from a format-style source with ``{}``/``{0}`` holes.

    ``{{`` and ``}}`` produce literal braces. Format specs and conversions
    are not allowed.

    Raises:
        TemplateParseError: For malformed placeholders or hole/value mismatch.
    """
    strings: List[str] = []
    hole_values: List[Any] = []
    pending = ""
    auto_index = 0
    try:
        parsed = list(string.Formatter().parse(source))
    except ValueError as e:
        raise TemplateParseError(f"Malformed placeholder: {e}", source) from None

    for literal, field_name, format_spec, conversion in parsed:
        pending += literal
        if field_name is None:
            continue
        if format_spec or conversion:
            raise TemplateParseError(
                f"Placeholder '{{{field_name}}}' may not carry a conversion or format spec",
                source,
            )
        if field_name == "":
            index = auto_index
            auto_index += 1
        elif field_name.isdigit():
            index = int(field_name)
        else:
            raise TemplateParseError(
                f"Placeholder '{{{field_name}}}' must be empty or positional", source
            )
        if index >= len(values):
            raise TemplateParseError(
                f"Placeholder {index} has no value ({len(values)} given)", source
            )
        strings.append(pending)
        hole_values.append(values[index])
        pending = ""

    strings.append(pending)
    return TemplateFragment(tuple(strings), tuple(hole_values))


def as_fragment(template: Union[TemplateFragment, str], *values: Any) -> TemplateFragment:
    if isinstance(template, TemplateFragment):
        if values:
            raise TemplateParseError("Values given alongside an already-built fragment")
        return template
    if isinstance(template, str):
        return inline(template, *values)
    raise TypeError(f"Expected a TemplateFragment or str, got {type(template)}")


@dataclass(frozen=True)
class _TagName:
    """Literal tag name, or an interpolated component reference."""

    label: str
    reference: Any = None
    is_reference: bool = False

    def matches(self, other: "_TagName") -> bool:
        if self.is_reference or other.is_reference:
            return other.is_reference and self.reference is other.reference
        return self.label == other.label


class _Parser:
    """Single-pass recursive descent over the hole-marked source."""

    def __init__(self, fragment: TemplateFragment):
        for chunk in fragment.strings:
            if HOLE in chunk:
                raise TemplateParseError("Template text may not contain NUL characters")
        self.fragment = fragment
        self.src = HOLE.join(fragment.strings)
        self.pos = 0
        self._hole_index: Dict[int, int] = {}
        for index, offset in enumerate(i for i, ch in enumerate(self.src) if ch == HOLE):
            self._hole_index[offset] = index

    # Errors ---------------------------------------------------------------

    def error(self, message: str, position: Optional[int] = None) -> TemplateParseError:
        if position is None:
            position = self.pos
        # Each hole is one marker char but two chars ("{}") in the shown source
        display_position = position + sum(1 for offset in self._hole_index if offset < position)
        return TemplateParseError(message, self.fragment.source, display_position)

    # Scanning -------------------------------------------------------------

    def at_end(self) -> bool:
        return self.pos >= len(self.src)

    def peek(self, text: str) -> bool:
        return self.src.startswith(text, self.pos)

    def expect(self, text: str) -> None:
        if not self.peek(text):
            found = self.src[self.pos : self.pos + 1].replace(HOLE, "{}") or "end of template"
            raise self.error(f"Expected '{text}', found '{found}'")
        self.pos += len(text)

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.src[self.pos].isspace():
            self.pos += 1

    def at_hole(self) -> bool:
        return not self.at_end() and self.src[self.pos] == HOLE

    def take_hole(self) -> Any:
        value = self.fragment.values[self._hole_index[self.pos]]
        self.pos += 1
        return value

    def read_name(self) -> str:
        start = self.pos
        while not self.at_end() and self.src[self.pos] in _NAME_CHARS:
            self.pos += 1
        return self.src[start : self.pos]

    # Grammar --------------------------------------------------------------

    def parse(self) -> Tuple[NodeDescriptor, ...]:
        return tuple(self.parse_nodes(None))

    def parse_nodes(
        self, open_tag: Optional[_TagName], open_position: int = 0
    ) -> List[NodeDescriptor]:
        nodes: List[NodeDescriptor] = []
        while True:
            if self.at_end():
                if open_tag is not None:
                    raise self.error(f"Tag <{open_tag.label}> is never closed", open_position)
                return nodes

            if self.peek("</"):
                close_position = self.pos
                closing = self.parse_close_tag()
                if open_tag is None:
                    raise self.error(f"Unexpected closing tag </{closing.label}>", close_position)
                if not open_tag.matches(closing):
                    raise self.error(
                        f"Closing tag </{closing.label}> does not match <{open_tag.label}>",
                        close_position,
                    )
                return nodes

            if self.peek("<!--"):
                end = self.src.find("-->", self.pos + 4)
                if end < 0:
                    raise self.error("Unterminated comment")
                self.pos = end + 3
            elif self.peek("<"):
                nodes.append(self.parse_tag())
            else:
                nodes.extend(self.parse_text())

    def parse_text(self) -> List[NodeDescriptor]:
        nodes: List[NodeDescriptor] = []
        buffer: List[str] = []

        def flush_buffer() -> None:
            text = "".join(buffer)
            buffer.clear()
            if text.strip():
                nodes.append(TextDescriptor(text))

        while not self.at_end() and not self.peek("<"):
            if self.at_hole():
                value = self.take_hole()
                if isinstance(value, TemplateFragment):
                    flush_buffer()
                    nodes.extend(parse_fragment(value))
                elif value is not None and value is not False:
                    buffer.append(str(value))
                continue

            end = self.pos
            while end < len(self.src) and self.src[end] not in ("<", HOLE):
                end += 1
            # Entities are decoded in literal text only, never in values
            buffer.append(unescape(self.src[self.pos : end]))
            self.pos = end
        flush_buffer()
        return nodes

    def parse_tag_name(self) -> _TagName:
        if self.at_hole():
            reference = self.take_hole()
            label = getattr(reference, "__name__", repr(reference))
            return _TagName(label, reference, is_reference=True)
        name = self.read_name()
        if not name or not name[0].isalpha():
            raise self.error("Expected a tag name or an interpolated component")
        return _TagName(name)

    def parse_close_tag(self) -> _TagName:
        self.expect("</")
        tag_name = self.parse_tag_name()
        self.skip_whitespace()
        self.expect(">")
        return tag_name

    def parse_tag(self) -> NodeDescriptor:
        start = self.pos
        self.expect("<")
        tag_name = self.parse_tag_name()

        target: Union[ElementDescriptor, ComponentInstantiationDescriptor]
        if tag_name.is_reference:
            try:
                target = ComponentInstantiationDescriptor(tag_name.reference)
            except TemplateParseError as e:
                raise self.error(str(e), start) from None
        else:
            target = ElementDescriptor(tag_name.label)

        self_closing = self.parse_attributes(target)
        if isinstance(target, ElementDescriptor) and target.tag.lower() in VOID_TAGS:
            self_closing = True

        children: List[NodeDescriptor] = []
        if not self_closing:
            children = self.parse_nodes(tag_name, start)

        if isinstance(target, ComponentInstantiationDescriptor):
            self.route_slots(target, children, start)
        else:
            target.children = tuple(children)
        return target

    def parse_attributes(
        self, target: Union[ElementDescriptor, ComponentInstantiationDescriptor]
    ) -> bool:
        """Parse attributes up to the end of the open tag.

        Returns:
            True if the tag self-closed.
        """
        while True:
            self.skip_whitespace()
            if self.at_end():
                raise self.error("Unterminated tag")
            if self.peek("/>"):
                self.pos += 2
                return True
            if self.peek(">"):
                self.pos += 1
                return False

            attr_position = self.pos
            if self.at_hole():
                raise self.error(
                    "Interpolated value in attribute-name position (directives need 'use:{}')"
                )
            name = self.read_attribute_name()

            try:
                if name == USE_PREFIX:
                    if not self.at_hole():
                        raise self.error("'use:' must be followed by an interpolated function")
                    action = self.take_hole()
                    if self.peek("="):
                        self.pos += 1
                        target.add_directive(action, self.parse_value(), has_params=True)
                    else:
                        target.add_directive(action)
                    continue

                if self.peek("="):
                    self.pos += 1
                    value = self.parse_value()
                else:
                    value = True
                target.add_attribute(name, value)
            except TemplateParseError as e:
                if e.fragment:
                    raise
                raise self.error(str(e), attr_position) from None

    def read_attribute_name(self) -> str:
        start = self.pos
        while not self.at_end() and self.src[self.pos] not in _ATTR_END:
            self.pos += 1
        name = self.src[start : self.pos]
        if not name:
            raise self.error("Expected an attribute name")
        return name

    def parse_value(self) -> Any:
        if self.at_end():
            raise self.error("Missing attribute value")

        quote = self.src[self.pos]
        if quote in "\"'":
            self.pos += 1
            parts = self.collect_value_parts(lambda ch: ch == quote)
            if self.at_end():
                raise self.error("Unterminated quoted attribute value")
            self.pos += 1
        else:
            parts = self.collect_value_parts(
                lambda ch: ch.isspace() or ch == ">" or self.peek("/>")
            )
            if not parts:
                raise self.error("Missing attribute value")

        # A lone hole keeps its value untouched; anything else becomes text
        if len(parts) == 1 and parts[0][0]:
            return parts[0][1]
        return "".join(str(value) for _, value in parts)

    def collect_value_parts(self, stop: Any) -> List[Tuple[bool, Any]]:
        parts: List[Tuple[bool, Any]] = []
        literal: List[str] = []
        while not self.at_end() and not stop(self.src[self.pos]):
            if self.at_hole():
                if literal:
                    parts.append((False, "".join(literal)))
                    literal = []
                parts.append((True, self.take_hole()))
            else:
                literal.append(self.src[self.pos])
                self.pos += 1
        if literal:
            parts.append((False, "".join(literal)))
        return parts

    def route_slots(
        self,
        target: ComponentInstantiationDescriptor,
        children: List[NodeDescriptor],
        position: int,
    ) -> None:
        """Distribute a component's content over its slots."""
        routed: Dict[str, List[NodeDescriptor]] = {}
        default: List[NodeDescriptor] = []

        try:
            for child in children:
                if isinstance(child, ElementDescriptor) and child.tag == SLOT_MARKER_TAG:
                    name = str(child.static_props.get(SLOT_ATTRIBUTE, DEFAULT_SLOT))
                    content = child.children
                    target.add_slot(name, tuple(content) if content else None)
                    continue

                slot_name = None
                if isinstance(child, (ElementDescriptor, ComponentInstantiationDescriptor)):
                    slot_name = child.static_props.pop(SLOT_ATTRIBUTE, None)
                if slot_name is None:
                    default.append(child)
                else:
                    routed.setdefault(str(slot_name), []).append(child)

            if default:
                target.add_slot(DEFAULT_SLOT, tuple(default))
            for name, content in routed.items():
                target.add_slot(name, tuple(content))
        except TemplateParseError as e:
            raise self.error(str(e), position) from None


def parse_fragment(fragment: TemplateFragment) -> Tuple[NodeDescriptor, ...]:
    """Parse a fragment into node descriptors.

    Raises:
        TemplateParseError: For unbalanced tags or malformed attributes.
        BindingWireError: For bind:/use:/on: values of the wrong kind.
    """
    nodes = _Parser(fragment).parse()
    _reject_stray_slot_markers(nodes, fragment)
    logger.debug(f"Parsed inline template into {len(nodes)} top-level nodes")
    return nodes


def _reject_stray_slot_markers(
    nodes: Tuple[NodeDescriptor, ...], fragment: TemplateFragment
) -> None:
    for node in nodes:
        if isinstance(node, ElementDescriptor):
            if node.tag == SLOT_MARKER_TAG:
                raise TemplateParseError(
                    "<template> slot markers are only allowed directly inside a component",
                    fragment.source,
                )
            _reject_stray_slot_markers(node.children, fragment)
        elif isinstance(node, ComponentInstantiationDescriptor):
            for content in node.slot_content.values():
                _reject_stray_slot_markers(content or (), fragment)
