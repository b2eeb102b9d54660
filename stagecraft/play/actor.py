"""Headless Actor: the presentation-side contract the Director talks to.

A real presentation layer subclasses Actor once per role type.  The Director
only ever calls the five methods below and never looks at anything else.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Optional

if TYPE_CHECKING:
    from stagecraft.play.director import Director
    from stagecraft.play.role import Role


class Actor:
    """Plays out one Role.  The base class just remembers the last state."""

    def __init__(self, role: "Role", director: Optional["Director"] = None) -> None:
        self.role = role
        self.director = director
        self.state: dict = role.generate_initial_state()

    def apply_state(self, state: dict) -> Optional[Awaitable[Any]]:
        """Show *state*.

        Return an awaitable while a visual transition is still running; the
        Director stays busy until every awaitable from one jump has settled.
        Overrides usually start with ``old = self.state`` before calling up.
        """
        self.state = state
        return None

    def advance(self) -> Optional[bool]:
        """Return False to refuse an advance (e.g. text still scrolling)."""
        return None

    def update(self, dt: float) -> None:
        pass

    def pause(self) -> None:
        pass

    def unpause(self) -> None:
        pass
