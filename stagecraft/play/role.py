"""Role base class and the role-type registry.

A Role describes one participant in a play independently of whoever renders
it.  Each role type declares the shape of its per-beat state
(``generate_initial_state``), which parts of that state survive into the
next beat (``propagate_state``) and the table of step kinds it accepts.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, List, Optional, Type, TypeVar

from stagecraft.play.actor import Actor
from stagecraft.play.step_kind import StepKind

if TYPE_CHECKING:
    from stagecraft.play.director import Director
    from stagecraft.play.script import Script

# type tag → Role subclass
ROLE_TYPES: Dict[str, Type["Role"]] = {}

R = TypeVar("R", bound="Role")


def register_role(type_name: str) -> Callable[[Type[R]], Type[R]]:
    """Class decorator making a Role subclass loadable under *type_name*."""

    def decorate(cls: Type[R]) -> Type[R]:
        if type_name in ROLE_TYPES:
            raise ValueError(f"Role type '{type_name}' is already registered")
        cls.type_name = type_name
        ROLE_TYPES[type_name] = cls
        return cls

    return decorate


def role_type(type_name: str) -> Type["Role"]:
    try:
        return ROLE_TYPES[type_name]
    except KeyError:
        raise ValueError(f"No such role type: {type_name}") from None


class Role:
    type_name: ClassVar[Optional[str]] = None
    STEP_KINDS: ClassVar[Dict[str, StepKind]] = {}
    # legacy action name → [step kind name, legacy arg keys...]
    LEGACY_JSON_ACTIONS: ClassVar[Dict[str, List[str]]] = {}
    actor_class: ClassVar[Type[Actor]] = Actor

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    # ── Loading and saving ───────────────────────────────────────────────

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Role":
        return cls(data["name"])

    @classmethod
    def from_legacy_json(cls, name: str, data: Dict[str, Any]) -> "Role":
        return cls(name)

    def post_load(self, script: "Script") -> None:
        """Restore cross-references once every role in *script* exists."""

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type_name}

    # ── Per-beat state ───────────────────────────────────────────────────

    def generate_initial_state(self) -> dict:
        """Blank state; its keys document the role's whole state schema."""
        return {}

    def propagate_state(self, prev: dict) -> dict:
        """Seed the next beat from *prev*.

        The result is mutated while the next beat is built, so it must never
        be *prev* itself.
        """
        return dict(prev)

    # ── Playback ─────────────────────────────────────────────────────────

    def cast(self, director: Optional["Director"] = None) -> Actor:
        return self.actor_class(self, director)
