"""Director: plays a Script's beats through a set of Actors.

The Director keeps a cursor into ``script.beats``.  Jumping to a beat hands
every role's state to its Actor.  Actors may answer with awaitables for
transitions still in flight; until all of them settle the Director is busy
and refuses to advance.  Once they settle, a beat that ended with an
auto-wait pause advances by itself.

    dispatch (jump) → await all (busy) → optional auto-advance

States:

    idle     cursor == -1, nothing shown yet
    at-beat  cursor on a beat, nothing pending
    busy     cursor on a beat, transitions pending

``paused`` is independent of the above and only forwarded to the Actors.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from stagecraft.play.actor import Actor
from stagecraft.play.beat import Beat
from stagecraft.play.role import Role
from stagecraft.play.script import Script
from stagecraft.play.step_kind import Pause

log = logging.getLogger(__name__)

Cast = Callable[[Role, "Director"], Actor]
BeatListener = Callable[[int], None]


class DirectorState(str, Enum):
    IDLE = "idle"
    AT_BEAT = "at-beat"
    BUSY = "busy"


def _default_cast(role: Role, director: "Director") -> Actor:
    return role.cast(director)


class Director:
    """Drives playback of one Script.

    Args:
        script: The Script to play.  The Director follows its edits.
        cast:   Builds an Actor for a Role; defaults to ``role.cast``.
    """

    def __init__(self, script: Script, cast: Optional[Cast] = None) -> None:
        self.script = script
        self.busy = False
        self.paused = False
        self.cursor = -1

        self._cast = cast or _default_cast
        self.actors: Dict[str, Actor] = {}
        self.role_to_actor: Dict[Role, Actor] = {}
        for role in script.roles:
            self._add_actor(role)

        self._listeners: List[BeatListener] = []
        # Bumped on every jump so that a stale settle can tell it is stale
        self._generation = 0
        self._settling: Optional["asyncio.Task[None]"] = None

        script.subscribe(self._on_script_event)

        if script.beats:
            self.jump(0)

    @property
    def state(self) -> DirectorState:
        if self.cursor < 0:
            return DirectorState.IDLE
        if self.busy:
            return DirectorState.BUSY
        return DirectorState.AT_BEAT

    def subscribe(self, listener: BeatListener) -> None:
        """Call *listener* with the new cursor after every jump."""
        self._listeners.append(listener)

    def close(self) -> None:
        """Stop following the Script's edits."""
        self.script.unsubscribe(self._on_script_event)

    def _add_actor(self, role: Role) -> None:
        actor = self._cast(role, self)
        self.actors[role.name] = actor
        self.role_to_actor[role] = actor

    # ── Navigation ───────────────────────────────────────────────────────

    def jump(self, beat_index: int) -> None:
        """Show beat *beat_index*, whether or not the Director is busy.

        Raises:
            IndexError: *beat_index* is outside the compiled beats.
            RuntimeError: an Actor returned an awaitable outside a running
                event loop.
        """
        if not 0 <= beat_index < len(self.script.beats):
            raise IndexError(f"No beat {beat_index} (script has {len(self.script.beats)})")

        self.cursor = beat_index
        beat = self.script.beats[beat_index]
        self._generation += 1

        pending: List[Awaitable[Any]] = []
        for role, state in beat.items():
            # A missing actor is a bug, not something to recover from
            outcome = self.role_to_actor[role].apply_state(state)
            if outcome is not None:
                pending.append(outcome)

        if pending:
            loop = asyncio.get_running_loop()
            self.busy = True
            self._settling = loop.create_task(
                self._settle(beat_index, beat, pending, self._generation)
            )
        else:
            self.busy = False
            self._settling = None

        for listener in list(self._listeners):
            listener(self.cursor)

    async def _settle(
        self,
        beat_index: int,
        beat: Beat,
        pending: List[Awaitable[Any]],
        generation: int,
    ) -> None:
        # A cancelled transition comes back as a CancelledError result
        results = await asyncio.gather(*pending, return_exceptions=True)
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            log.error(
                "Transition for beat %d failed", beat_index, exc_info=failures[0]
            )
            if generation == self._generation:
                self.busy = False
            return

        if generation != self._generation:
            # Another jump happened meanwhile; it owns the busy flag now
            return
        self.busy = False
        if beat.pause is Pause.WAIT:
            self.advance()

    async def wait_idle(self) -> None:
        """Wait until pending transitions (and any auto-advance) have settled."""
        while self._settling is not None and not self._settling.done():
            await self._settling

    def advance(self) -> None:
        """Move to the next beat, unless busy or an Actor refuses."""
        if self.busy:
            return

        # Actors such as a dialogue box may still be revealing text; ask all
        # of them, so each gets the chance to catch up
        if self.cursor >= 0:
            declined = False
            for actor in self.actors.values():
                if actor.advance() is False:
                    declined = True
            if declined:
                return

        if self.cursor >= len(self.script.beats) - 1:
            return
        self.jump(self.cursor + 1)

    def backtrack(self) -> None:
        """Go back one beat, skipping beats that would advance by themselves."""
        if self.cursor <= 0:
            return

        cursor = self.cursor - 1
        while cursor > 0 and self.script.beats[cursor].pause is Pause.WAIT:
            cursor -= 1
        self.jump(cursor)

    def jump_to_bookmark(self, label: str) -> None:
        beat_index = self.script.find_bookmark(label)
        if beat_index is None:
            raise KeyError(f"No bookmark named '{label}'")
        self.jump(beat_index)

    # ── Pass-throughs ────────────────────────────────────────────────────

    def update(self, dt: float) -> None:
        for actor in self.actors.values():
            actor.update(dt)

    def pause(self) -> None:
        if self.paused:
            return
        self.paused = True
        for actor in self.actors.values():
            actor.pause()

    def unpause(self) -> None:
        if not self.paused:
            return
        self.paused = False
        for actor in self.actors.values():
            actor.unpause()

    # ── Following script edits ───────────────────────────────────────────

    def _on_script_event(self, event: str, detail: Dict[str, Any]) -> None:
        if event == "role-added":
            self._add_actor(detail["role"])
            if self.cursor >= 0 and self.script.beats:
                self.jump(min(self.cursor, len(self.script.beats) - 1))
            return

        beat_count = len(self.script.beats)
        if beat_count == 0:
            self.cursor = -1
            self.busy = False
            return
        if self.cursor < 0:
            return

        beat_index = detail.get("beat_index") or 0
        if self.cursor > beat_index:
            # Beats before the cursor were split or merged
            self.jump(max(0, min(self.cursor + detail.get("beat_delta", 0), beat_count - 1)))
        elif self.cursor == beat_index:
            self.jump(min(self.cursor, beat_count - 1))
