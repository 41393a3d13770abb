"""Contracts for the host-supplied sidebar widgets and drawing surface."""
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, DefaultDict, List, Optional, Protocol, Set, runtime_checkable

LOGGER = logging.getLogger(__name__)

PLACEHOLDER = "—"


@dataclass(frozen=True)
class WidgetEvent:
    """Payload delivered to widget listeners."""

    type: str
    value: str = ""
    key: Optional[str] = None


Listener = Callable[[WidgetEvent], None]


@runtime_checkable
class Widget(Protocol):
    """What the engine needs from a sidebar element."""

    def set_text(self, text: str) -> None: ...

    def set_html(self, markup: str) -> None: ...

    def add_class(self, *names: str) -> None: ...

    def remove_class(self, *names: str) -> None: ...

    def listen(self, event_type: str, listener: Listener) -> None: ...


@dataclass
class PanelWidget:
    """In-process widget that records content and dispatches events."""

    text: str = ""
    html: str = ""
    value: str = ""
    classes: Set[str] = field(default_factory=set)
    _listeners: DefaultDict[str, List[Listener]] = field(default_factory=lambda: defaultdict(list), repr=False)

    def set_text(self, text: str) -> None:
        self.text = text
        self.html = ""

    def set_html(self, markup: str) -> None:
        self.html = markup
        self.text = ""

    def add_class(self, *names: str) -> None:
        self.classes.update(names)

    def remove_class(self, *names: str) -> None:
        self.classes.difference_update(names)

    def listen(self, event_type: str, listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def emit(self, event_type: str, *, value: Optional[str] = None, key: Optional[str] = None) -> None:
        if value is not None:
            self.value = value
        event = WidgetEvent(type=event_type, value=self.value, key=key)
        for listener in list(self._listeners[event_type]):
            listener(event)

    @property
    def content(self) -> str:
        return self.html or self.text


@dataclass
class SidebarPanel:
    """The sidebar collaborator: content targets and input controls."""

    selected_label: Widget
    definition: Widget
    related: Widget
    tags: Widget
    search: Widget
    reset: Widget
    lang: Widget
    prev: Optional[Widget] = None
    next: Optional[Widget] = None

    @classmethod
    def in_memory(cls, *, with_stepper: bool = True) -> "SidebarPanel":
        return cls(
            selected_label=PanelWidget(),
            definition=PanelWidget(),
            related=PanelWidget(),
            tags=PanelWidget(),
            search=PanelWidget(),
            reset=PanelWidget(),
            lang=PanelWidget(),
            prev=PanelWidget() if with_stepper else None,
            next=PanelWidget() if with_stepper else None,
        )


@runtime_checkable
class DisplaySurface(Protocol):
    """Host element the canvas attaches to, plus the sidebar's measured width."""

    def sidebar_width(self) -> float: ...

    def show_error(self, message: str) -> None: ...


@dataclass
class MemorySurface:
    """Display surface stand-in recording surfaced errors."""

    sidebar: float = 0.0
    errors: List[str] = field(default_factory=list)

    def sidebar_width(self) -> float:
        return self.sidebar

    def show_error(self, message: str) -> None:
        self.errors.append(message)


PanelProvider = Callable[[], Optional[SidebarPanel]]


async def wait_for_panel(provider: PanelProvider, *, poll_seconds: float = 0.03) -> SidebarPanel:
    """Poll ``provider`` until the host has injected the sidebar."""

    while True:
        panel = provider()
        if panel is not None:
            return panel
        await asyncio.sleep(poll_seconds)


__all__ = [
    "DisplaySurface",
    "Listener",
    "MemorySurface",
    "PLACEHOLDER",
    "PanelProvider",
    "PanelWidget",
    "SidebarPanel",
    "Widget",
    "WidgetEvent",
    "wait_for_panel",
]
