"""Active template state shared between the UI and the render loop."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Deque, Union

logger = logging.getLogger(__name__)


class Template(Enum):
    """Overlay templates, keyed by their UI identifier."""
    NONE = "none"
    FULL = "full"
    BRAZILIAN = "brazilian"
    LANDING_STRIP = "landing-strip"
    TRIANGLE = "triangle"
    HEART = "heart"
    LIGHTNING = "lightning"
    STAR = "star"

    @classmethod
    def parse(cls, identifier: Union[str, "Template", None]) -> "Template":
        """Map a UI identifier to a template; unknown identifiers map to NONE."""
        if isinstance(identifier, Template):
            return identifier
        try:
            return cls(identifier)
        except ValueError:
            logger.warning("Unknown template %r, drawing nothing", identifier)
            return cls.NONE

    def next(self) -> "Template":
        members = list(Template)
        return members[(members.index(self) + 1) % len(members)]


class TemplateSelection:
    """
    Single-writer channel for the active template.

    The UI posts identifiers from its own event handler; the render loop
    calls ``current()`` once at the top of each tick, which applies every
    pending change in order and returns the latest template.
    """

    def __init__(self, initial: Union[str, Template] = Template.NONE):
        self._current = Template.parse(initial)
        self._pending: Deque[Template] = deque()

    def post(self, identifier: Union[str, Template]):
        """Queue a change from the UI collaborator."""
        self._pending.append(Template.parse(identifier))

    def current(self) -> Template:
        while self._pending:
            self._current = self._pending.popleft()
        return self._current

    def peek(self) -> Template:
        """Latest template including pending changes, without applying them."""
        return self._pending[-1] if self._pending else self._current
