"""Minimal page model the controllers render into.

A :class:`Page` holds named elements, routes events to registered handlers,
records navigation and collects the notifications shown to the user.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Handler = Callable[[], Awaitable[None] | None]


@dataclass
class Element:
    element_id: str
    value: str = ""
    inner_html: str = ""
    inputs: list[Element] = field(default_factory=list)

    def reset(self) -> None:
        """Clear the element's own value and every child input."""
        self.value = ""
        for child in self.inputs:
            child.value = ""


@dataclass(frozen=True)
class Notification:
    type: str
    message: str
    with_progress: bool = True
    duration: int | None = None


class Page:
    """In-process stand-in for a rendered page."""

    def __init__(self, location: str = "/") -> None:
        self.location = location
        self.history: list[str] = []
        self.notifications: list[Notification] = []
        self._elements: dict[str, Element] = {}
        self._listeners: dict[tuple[str, str], list[Handler]] = defaultdict(list)

    def add_element(self, element_id: str, **attributes: object) -> Element:
        element = Element(element_id, **attributes)  # type: ignore[arg-type]
        self._elements[element_id] = element
        return element

    def get_element(self, element_id: str) -> Element:
        """Return the element, raising KeyError if the page does not have it."""
        return self._elements[element_id]

    def add_event_listener(self, element_id: str, event: str, handler: Handler) -> None:
        self.get_element(element_id)
        self._listeners[(element_id, event)].append(handler)

    async def dispatch(self, element_id: str, event: str) -> None:
        """Run every handler registered for ``event`` on the element, in order."""
        for handler in list(self._listeners.get((element_id, event), ())):
            result = handler()
            if inspect.isawaitable(result):
                await result

    def navigate(self, url: str) -> None:
        logger.debug("Navigating from %s to %s", self.location, url)
        self.history.append(self.location)
        self.location = url

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
