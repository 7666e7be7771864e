# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tabs/Tab pair sharing state through component context."""

from typing import List, Optional, Set

from component_harness.dom import Node, h
from component_harness.runtime import Component

TABS_CONTEXT = "tabs"


class Tabs(Component):
    defaults = {"selected": None}

    def setup(self) -> None:
        self.tabs: List["Tab"] = []
        self.set_context(TABS_CONTEXT, self)

    def create(self) -> List[Node]:
        tablist = h("div", {"role": "tablist"})
        self.render_slot("default", tablist)
        return [tablist]

    def register(self, tab: "Tab") -> None:
        self.tabs.append(tab)
        if self.props["selected"] is None:
            self.assign("selected", tab.props["label"])

    def select(self, label: str) -> None:
        self.assign("selected", label)

    def update(self, changed: Set[str]) -> None:
        if "selected" in changed:
            for tab in self.tabs:
                tab.refresh()


class Tab(Component):
    defaults = {"label": ""}

    def setup(self) -> None:
        self.owner: Optional[Tabs] = self.get_context(TABS_CONTEXT)
        if self.owner is None:
            raise RuntimeError("<Tab> must be rendered inside <Tabs>")

    def create(self) -> List[Node]:
        self.button = h("button", {"role": "tab", "type": "button"}, self.props["label"])
        self.button.add_event_listener(
            "click", lambda event: self.owner.select(self.props["label"])
        )
        self.owner.register(self)
        self.refresh()
        return [self.button]

    def refresh(self) -> None:
        selected = self.owner.props["selected"] == self.props["label"]
        self.button.set_attribute("aria-selected", "true" if selected else "false")
