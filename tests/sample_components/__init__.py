# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Small components and directives exercised by the test suite."""

from .card import Card
from .directives import click_outside, track
from .env_banner import EnvBanner
from .keypad import Keypad
from .nav_link import NavLink
from .search_form import SearchForm
from .tabs import TABS_CONTEXT, Tab, Tabs

__all__ = [
    "Card",
    "EnvBanner",
    "Keypad",
    "NavLink",
    "SearchForm",
    "TABS_CONTEXT",
    "Tab",
    "Tabs",
    "click_outside",
    "track",
]
