"""Script: the step log of a play, its roles, and the beats compiled from them.

A Script is defined by Steps, discrete commands that control its Roles.  The
steps are folded into Beats, the states of every role at one moment.  A beat
ends at a step whose kind pauses: usually to wait for the audience, sometimes
to wait for a transition to finish.

Compilation is a replay of the step log.  After an edit at step ``k`` only
the beats from the one containing step ``k - 1`` onwards are rebuilt; the
result is the same as a rebuild from scratch.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from stagecraft import __version__
from stagecraft.errors import CompilationFailure, OwnershipViolation, ValidationFailure
from stagecraft.play.beat import Beat
from stagecraft.play.models import DEFAULT_HEIGHT, DEFAULT_WIDTH, ScriptDocument, ScriptMeta
from stagecraft.play.role import Role, role_type
from stagecraft.play.step import Step

log = logging.getLogger(__name__)

# (event name, detail) → None
Listener = Callable[[str, Dict[str, Any]], None]
Bookmark = Tuple[int, str]


class Script:
    def __init__(self) -> None:
        self.title: Optional[str] = None
        self.subtitle: Optional[str] = None
        self.author: Optional[str] = None
        self.created: Optional[str] = None
        self.modified: Optional[str] = None
        self.published: Optional[str] = None
        self.width = DEFAULT_WIDTH
        self.height = DEFAULT_HEIGHT

        self.roles: List[Role] = []
        self.role_index: Dict[str, Role] = {}

        self.steps: List[Step] = []
        self.beats: List[Beat] = []
        # (beat index, label), in step order
        self.bookmarks: List[Bookmark] = []

        self._listeners: List[Listener] = []

    # ── Loading and saving ───────────────────────────────────────────────

    @classmethod
    def from_json(cls, data: Union[ScriptDocument, Dict[str, Any]]) -> "Script":
        """Build a Script from a serialized document and compile it once.

        Raises:
            pydantic.ValidationError: *data* is not a well-formed document.
            ValueError: unknown role type or a step naming an unknown role.
            UnknownStepKind: a step names a kind its role does not have.
        """
        document = data if isinstance(data, ScriptDocument) else ScriptDocument.model_validate(data)

        script = cls()
        meta = document.meta
        script.title = meta.title
        script.subtitle = meta.subtitle
        script.author = meta.author
        script.created = meta.created
        script.modified = meta.modified
        script.published = meta.published
        script.width = meta.width
        script.height = meta.height

        for record in document.roles:
            script._add_role(role_type(record.type).from_json(record.model_dump()))
        # Cross-references need every role to exist first
        for role in script.roles:
            role.post_load(script)

        steps = []
        for role_name, kind_name, *args in document.steps:
            role = script.role_index.get(role_name)
            if role is None:
                raise ValueError(f"Step refers to unknown role '{role_name}'")
            steps.append(Step(role, kind_name, args))
        script._set_steps(steps)

        log.info(
            "Loaded script %r: %d roles, %d steps, %d beats",
            script.title, len(script.roles), len(script.steps), len(script.beats),
        )
        return script

    def to_document(self, modified: Optional[str] = None) -> ScriptDocument:
        meta = ScriptMeta(
            title=self.title,
            subtitle=self.subtitle,
            author=self.author,
            created=self.created,
            modified=modified if modified is not None else self.modified,
            published=self.published,
            width=self.width,
            height=self.height,
            stagecraft_version=__version__,
        )
        return ScriptDocument.model_validate({
            "meta": meta.model_dump(),
            "roles": [role.to_json() for role in self.roles],
            "steps": [step.to_json() for step in self.steps],
        })

    def to_json(self, modified: Optional[str] = None) -> Dict[str, Any]:
        """Return a JSON-compatible dict.  Never reads the clock."""
        return self.to_document(modified).model_dump(mode="json")

    # ── Change announcements ─────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _announce(self, event: str, **detail: Any) -> None:
        for listener in list(self._listeners):
            listener(event, detail)

    # ── Roles ────────────────────────────────────────────────────────────

    def _add_role(self, role: Role) -> None:
        if role.name in self.role_index:
            raise ValueError(f"Role name '{role.name}' is already in use")
        self.roles.append(role)
        self.role_index[role.name] = role

    def add_role(self, role: Role) -> None:
        """Add a role after loading.

        Every beat is rebuilt from scratch rather than having the role's
        initial state pasted into existing beats, so the beats stay a pure
        function of the roles and steps.
        """
        self._add_role(role)
        try:
            self._recompile(0)
        except CompilationFailure:
            self.roles.pop()
            del self.role_index[role.name]
            raise
        self._announce("role-added", role=role)

    # ── Compilation ──────────────────────────────────────────────────────

    def _set_steps(self, steps: List[Step]) -> None:
        self.steps = list(steps)
        self._refresh_beats(0)

    def _refresh_beats(self, initial_step_index: int = 0) -> None:
        """Recompile beats, resuming at the beat holding step ``initial_step_index - 1``.

        Steps before the resume point are only counted, not replayed; their
        effects already live in the surviving beats.  Bookmarks are always
        recomputed in full.

        Raises:
            CompilationFailure: a step kind's apply function raised.  Beats
                are left in an unusable state; the mutating entry points
                below restore their snapshot when this happens.
        """
        if not self.steps:
            self.beats = []
            self.bookmarks = []
            return

        initial_step_index = min(initial_step_index, len(self.steps))
        if not self.beats or initial_step_index <= 1:
            first_beat_index = 0
        else:
            first_beat_index = self.steps[initial_step_index - 1].beat_index or 0
            first_beat_index = min(first_beat_index, len(self.beats))
        log.debug("rebeating from step %d (beat %d)", initial_step_index, first_beat_index)

        if first_beat_index == 0:
            beat = Beat.create_first(self.roles)
            self.beats = [beat]
        else:
            self.beats = self.beats[:first_beat_index]
            beat = self.beats[-1].create_next()
            self.beats.append(beat)
        self.bookmarks = []

        last_index = len(self.steps) - 1
        beat_index = 0
        for i, step in enumerate(self.steps):
            step.index = i
            step.beat_index = beat_index

            if step.role.type_name == "stage" and step.kind_name == "bookmark":
                self.bookmarks.append((beat_index, step.args[0]))

            if beat_index < first_beat_index:
                # Already baked into a surviving beat
                if step.kind.pause.pauses:
                    beat_index += 1
                continue

            try:
                step.update_beat(beat)
            except Exception as exc:
                raise CompilationFailure(i, step.role.name, step.kind_name) from exc
            beat.last_step_index = i

            if step.kind.pause.pauses:
                beat.pause = step.kind.pause
                # The last step never opens a trailing empty beat
                if i == last_index:
                    break
                beat = beat.create_next()
                self.beats.append(beat)
                beat_index += 1

    def _recompile(self, initial_step_index: int, steps: Optional[List[Step]] = None) -> None:
        """Swap in *steps* (if given) and recompile, all or nothing."""
        saved_steps = self.steps
        saved_beats = self.beats
        saved_bookmarks = self.bookmarks
        saved_indices = [(step, step.index, step.beat_index) for step in saved_steps]
        if steps is not None:
            self.steps = steps
        try:
            self._refresh_beats(initial_step_index)
        except CompilationFailure:
            log.debug("compilation failed; restoring previous beats")
            for step in self.steps:
                step.index = None
                step.beat_index = None
            self.steps = saved_steps
            self.beats = saved_beats
            self.bookmarks = saved_bookmarks
            for step, index, beat_index in saved_indices:
                step.index = index
                step.beat_index = beat_index
            raise

    # ── Step log queries ─────────────────────────────────────────────────

    def _assert_own_step(self, step: Step) -> None:
        index = step.index
        if index is None or index >= len(self.steps) or self.steps[index] is not step:
            raise OwnershipViolation(f"Step is not a part of this Script: {step!r}")

    def _assert_own_role(self, role: Role) -> None:
        if self.role_index.get(role.name) is not role:
            raise OwnershipViolation(f"Role is not a part of this Script: {role!r}")

    def get_beat_for_step(self, step: Step) -> Beat:
        self._assert_own_step(step)
        return self.beats[step.beat_index]

    def find_bookmark(self, label: str) -> Optional[int]:
        """Return the beat index of the first bookmark named *label*."""
        for beat_index, bookmark_label in self.bookmarks:
            if bookmark_label == label:
                return beat_index
        return None

    def check_steps(self) -> List[ValidationFailure]:
        """Collect advisory problems from every step's check function."""
        failures: List[ValidationFailure] = []
        for step in self.steps:
            failures.extend(step.check())
        return failures

    # ── Step log mutation ────────────────────────────────────────────────

    def insert_step(self, new_step: Step, index: int) -> None:
        """Insert *new_step* at *index* (clamped to the log), then recompile."""
        if any(step is new_step for step in self.steps):
            raise ValueError(f"Step is already part of this Script: {new_step!r}")
        self._assert_own_role(new_step.role)

        index = max(0, min(index, len(self.steps)))
        beat_count = len(self.beats)
        steps = list(self.steps)
        steps.insert(index, new_step)
        self._recompile(index, steps)

        self._announce(
            "step-inserted",
            step=new_step,
            index=index,
            beat_index=new_step.beat_index,
            beat_delta=len(self.beats) - beat_count,
        )

    def delete_step(self, step: Step) -> None:
        self._assert_own_step(step)

        index = step.index
        beat_index = step.beat_index
        beat_count = len(self.beats)
        steps = list(self.steps)
        del steps[index]
        self._recompile(index, steps)
        step.index = None
        step.beat_index = None

        self._announce(
            "step-deleted",
            step=step,
            index=index,
            beat_index=min(beat_index, max(len(self.beats) - 1, 0)),
            beat_delta=len(self.beats) - beat_count,
        )

    def replace_step(self, old_step: Step, new_step: Step) -> None:
        """Put *new_step* where *old_step* was, e.g. after editing arguments."""
        self._assert_own_step(old_step)
        if any(step is new_step for step in self.steps):
            raise ValueError(f"Step is already part of this Script: {new_step!r}")
        self._assert_own_role(new_step.role)

        index = old_step.index
        beat_count = len(self.beats)
        steps = list(self.steps)
        steps[index] = new_step
        self._recompile(index, steps)
        old_step.index = None
        old_step.beat_index = None

        self._announce(
            "steps-updated",
            steps=[new_step],
            beat_index=new_step.beat_index,
            beat_delta=len(self.beats) - beat_count,
        )

    def update_steps(self, *steps: Step) -> None:
        """Recompile after something the given steps depend on has changed.

        Typically called with every step of a role whose configuration
        (dialogue color, pose table, ...) was edited.
        """
        if not steps:
            return
        for step in steps:
            self._assert_own_step(step)

        first_index = min(step.index for step in steps)
        beat_count = len(self.beats)
        self._recompile(first_index)

        self._announce(
            "steps-updated",
            steps=list(steps),
            beat_index=min(step.beat_index for step in steps),
            beat_delta=len(self.beats) - beat_count,
        )
