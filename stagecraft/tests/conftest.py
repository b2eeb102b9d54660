"""Shared fixtures: a small cast and helpers to build and inspect plays."""
from __future__ import annotations

import copy
from typing import Any, Callable, Iterable, List, Sequence, Tuple

import pytest

from stagecraft.play import (
    Character,
    Curtain,
    DialogueBox,
    Jukebox,
    Mural,
    Role,
    Script,
    Stage,
    Step,
)


class Cast:
    """One of each role type, wired together like a loaded play."""

    def __init__(self) -> None:
        self.stage = Stage("stage")
        self.curtain = Curtain("curtain")
        self.mural = Mural("credits", "<p>fin</p>")
        self.dialogue = DialogueBox("dialogue")
        self.jukebox = Jukebox("jukebox")
        self.jukebox.add_track("theme", "music/theme.ogg")
        self.jukebox.add_track("storm", "music/storm.ogg", loop=False)
        self.lena = Character("lena", position="left")
        self.lena.add_static_pose("neutral", "lena/neutral.png")
        self.lena.poses["dressed"] = {
            "type": "composite",
            "order": ["body", "face"],
            "layers": {
                "body": {"optional": False, "variants": {"coat": "lena/coat.png"}},
                "face": {"optional": True, "variants": {"smile": "lena/smile.png"}},
            },
        }
        self.lena.dialogue_box = self.dialogue
        self.lena.dialogue_name = "Lena"
        self.lena.dialogue_color = "#c04040"
        self.lena.dialogue_position = "left"
        self.marco = Character("marco", position="right")
        self.marco.add_static_pose("neutral", "marco/neutral.png")
        self.marco.dialogue_box = self.dialogue
        self.marco.dialogue_name = "Marco"
        self.marco.dialogue_color = "#4040c0"
        self.marco.dialogue_position = "right"

    @property
    def roles(self) -> List[Role]:
        return [
            self.dialogue, self.stage, self.curtain, self.mural,
            self.jukebox, self.lena, self.marco,
        ]

    def sample_steps(self) -> List[Step]:
        """A short play touching every role type and every pause class."""
        return [
            Step(self.stage, "bookmark", ["prologue"]),
            Step(self.jukebox, "play", ["theme"]),
            Step(self.lena, "pose", ["neutral"]),
            Step(self.lena, "say", ["Is anyone there?"]),
            Step(self.marco, "pose", ["neutral"]),
            Step(self.marco, "say", ["Only me."]),
            Step(self.stage, "note", ["tension rises"]),
            Step(self.lena, "pose", ["dressed", {"body": "coat"}]),
            Step(self.stage, "pause"),
            Step(self.curtain, "lower"),
            Step(self.stage, "bookmark", ["chapter 1"]),
            Step(self.jukebox, "play", ["storm"]),
            Step(self.marco, "leave"),
            Step(self.lena, "pose", ["dressed", {"face": "smile"}]),
            Step(self.lena, "say", ["He left."]),
            Step(self.jukebox, "stop"),
            Step(self.mural, "show"),
        ]


@pytest.fixture
def cast() -> Cast:
    return Cast()


def build_script(roles: Iterable[Role], steps: Sequence[Step]) -> Script:
    script = Script()
    for role in roles:
        script._add_role(role)
    script._set_steps(list(steps))
    return script


def fresh_copies(steps: Iterable[Step]) -> List[Step]:
    return [step.with_args(*step.args) for step in steps]


def compiled(script: Script) -> Tuple[Any, ...]:
    """Everything the compiler produces, detached from later mutation."""
    beats = [
        (
            beat.first_step_index,
            beat.last_step_index,
            beat.pause,
            {role.name: copy.deepcopy(state) for role, state in beat.items()},
        )
        for beat in script.beats
    ]
    indices = [(step.index, step.beat_index) for step in script.steps]
    return beats, indices, list(script.bookmarks)


@pytest.fixture
def make_script() -> Callable[..., Script]:
    return build_script


@pytest.fixture
def snapshot() -> Callable[[Script], Tuple[Any, ...]]:
    return compiled


@pytest.fixture
def copy_steps() -> Callable[[Iterable[Step]], List[Step]]:
    return fresh_copies
