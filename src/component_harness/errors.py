# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Error taxonomy for the component test harness.

Every error here is fatal to the single test that raised it. Nothing is
retried: a test either mounts its component completely or fails outright.

- TemplateParseError: malformed inline template (unmatched tags, bad prefix)
- MockResolutionError: a component asked for an ambient symbol with no mock
- BindingWireError: a bind:/use:/on: value of the wrong kind

Assertion failures raised by DOM queries are a separate category
(see component_harness.queries.QueryError).
"""

from typing import Any, Optional

# Fragments longer than this are shortened in error messages
_MAX_EXCERPT = 120


def excerpt(source: str, position: Optional[int] = None) -> str:
    """Return a printable excerpt of template source around a position.

    Args:
        source: Template source (holes rendered as ``{}``).
        position: Character offset of the problem, if known.

    Returns:
        The excerpt, with a caret line when a position is given.
    """
    if position is None:
        text = source if len(source) <= _MAX_EXCERPT else source[:_MAX_EXCERPT] + "..."
        return text.replace("\n", " ")

    start = max(0, position - _MAX_EXCERPT // 2)
    end = min(len(source), start + _MAX_EXCERPT)
    text = source[start:end].replace("\n", " ")
    return f"{text}\n{' ' * (position - start)}^"


class HarnessError(Exception):
    """Base class for all harness errors."""

    pass


class TemplateParseError(HarnessError):
    """Raised when an inline template cannot be parsed."""

    def __init__(self, message: str, fragment: str = "", position: Optional[int] = None):
        self.fragment = fragment
        self.position = position
        if fragment:
            message = f"{message}\n{excerpt(fragment, position)}"
        super().__init__(message)


class MockResolutionError(HarnessError, ImportError):
    """Raised when an ambient runtime symbol has no substitute.

    Also an ImportError, so code written against real modules sees the same
    failure it would get from ``from module import missing``.
    """

    def __init__(self, module: str, symbol: Optional[str] = None, detail: str = ""):
        self.module = module
        self.symbol = symbol
        if symbol is None:
            message = f"No mock registered for runtime module '{module}'"
        else:
            message = f"Runtime module '{module}' mock does not provide symbol '{symbol}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class BindingWireError(HarnessError):
    """Raised when a bind:, use: or on: attribute value has the wrong kind."""

    def __init__(self, attribute: str, value: Any, expected: str):
        self.attribute = attribute
        self.value = value
        super().__init__(
            f"Attribute '{attribute}' expects {expected}, got {type(value).__name__}: {value!r}"
        )
