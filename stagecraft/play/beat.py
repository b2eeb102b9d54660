"""Beats: the state of every Role at one moment of playback."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, Tuple

from stagecraft.play.step_kind import Pause

if TYPE_CHECKING:
    from stagecraft.play.role import Role


class Beat:
    """Map of Role → state, plus how the beat ends and which steps built it.

    Beats are mutated only while the Script compiles them; afterwards they
    are replaced, never patched.
    """

    def __init__(self, states: Dict["Role", dict], first_step_index: int) -> None:
        self.states = states
        # Set by the compiler from the step that closes the beat
        self.pause: Pause = Pause.NONE
        self.first_step_index = first_step_index
        self.last_step_index = first_step_index

    def __repr__(self) -> str:
        return (
            f"<Beat steps {self.first_step_index}-{self.last_step_index} "
            f"pause={self.pause.value}>"
        )

    @classmethod
    def create_first(cls, roles: Iterable["Role"]) -> "Beat":
        return cls({role: role.generate_initial_state() for role in roles}, 0)

    def create_next(self) -> "Beat":
        """Start the following beat, propagating every role's state."""
        states = {role: role.propagate_state(prev) for role, prev in self.states.items()}
        return Beat(states, self.last_step_index + 1)

    def get(self, role: "Role") -> dict:
        return self.states[role]

    def set(self, role: "Role", state: dict) -> None:
        self.states[role] = state

    def set_twiddle(self, role: "Role", key: str, value: Any) -> None:
        self.states[role][key] = value

    def items(self) -> Iterator[Tuple["Role", dict]]:
        return iter(self.states.items())

    def to_json(self) -> Dict[str, Any]:
        return {
            "pause": self.pause.value,
            "first_step_index": self.first_step_index,
            "last_step_index": self.last_step_index,
            "states": {role.name: state for role, state in self.states.items()},
        }
