"""Declarative step kinds: what a Role can be told to do.

A StepKind is defined once per role type and never changes at runtime.  Its
``apply`` function folds one step into the in-progress Beat:

    apply(role, beat, state, *args) -> None

``state`` is ``beat.get(role)``; ``beat`` is passed too so that a kind can
reach other roles' state within the same beat (a character's ``say`` writes
into its dialogue box).  ``check(role, *args)`` returns a list of advisory
messages, or None when the arguments look fine.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple


class Pause(str, Enum):
    """How a beat ends once the step carrying this classification is folded in."""

    NONE = "none"  # keep folding steps into the same beat
    HOLD = "hold"  # stop and wait for the audience to advance
    WAIT = "wait"  # stop, then advance by itself once transitions finish

    @property
    def pauses(self) -> bool:
        return self is not Pause.NONE


@dataclass(frozen=True)
class ArgSpec:
    """One positional argument of a step kind.

    ``type`` is a semantic tag for authoring tools (``string``, ``prose``,
    ``track``, ``pose``, ``pose_composite``); the engine never reads it.
    """

    name: str
    type: str = "string"
    nullable: bool = True


def _no_check(role: Any, *args: Any) -> Optional[List[str]]:
    return None


def _no_apply(role: Any, beat: Any, state: dict, *args: Any) -> None:
    return None


@dataclass(frozen=True)
class StepKind:
    name: str
    hint: str = ""
    args: Tuple[ArgSpec, ...] = ()
    pause: Pause = Pause.NONE
    is_major_transition: bool = False
    check: Callable[..., Optional[List[str]]] = _no_check
    apply: Callable[..., None] = _no_apply

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ")
