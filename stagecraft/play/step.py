"""Steps: single authored commands, choreographing one Role each."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from stagecraft.errors import UnknownStepKind, ValidationFailure
from stagecraft.play.step_kind import StepKind

if TYPE_CHECKING:
    from stagecraft.play.beat import Beat
    from stagecraft.play.role import Role


class Step:
    """One command: a Role, the name of one of its step kinds, and arguments.

    Role, kind and arguments never change after construction.  ``index`` and
    ``beat_index`` are filled in by the Script that owns the step and are
    None while the step is not part of any Script.
    """

    def __init__(self, role: "Role", kind_name: str, args: Any = ()) -> None:
        kind = type(role).STEP_KINDS.get(kind_name)
        if kind is None:
            raise UnknownStepKind(role.name, role.type_name, kind_name)

        args = tuple(args)
        if len(args) > len(kind.args):
            raise ValueError(
                f"Step '{kind_name}' for role '{role.name}' takes {len(kind.args)} "
                f"argument(s), got {len(args)}"
            )
        # Trailing arguments are optional
        args += (None,) * (len(kind.args) - len(args))

        self._role = role
        self._kind_name = kind_name
        self._kind = kind
        self._args: Tuple[Any, ...] = args

        self.index: Optional[int] = None
        self.beat_index: Optional[int] = None

    def __repr__(self) -> str:
        return f"<Step {self._role.name}.{self._kind_name}{self._args!r} @{self.index}>"

    @property
    def role(self) -> "Role":
        return self._role

    @property
    def kind_name(self) -> str:
        return self._kind_name

    @property
    def kind(self) -> StepKind:
        return self._kind

    @property
    def args(self) -> Tuple[Any, ...]:
        return self._args

    def with_args(self, *args: Any) -> "Step":
        """Return an unowned copy of this step with different arguments."""
        return Step(self._role, self._kind_name, args)

    def update_beat(self, beat: "Beat") -> None:
        """Fold this step into *beat*."""
        self._kind.apply(self._role, beat, beat.get(self._role), *self._args)

    def check(self) -> List[ValidationFailure]:
        messages = self._kind.check(self._role, *self._args) or []
        return [
            ValidationFailure(
                step_index=self.index,
                role_name=self._role.name,
                kind_name=self._kind_name,
                message=message,
            )
            for message in messages
        ]

    def to_json(self) -> List[Any]:
        return [self._role.name, self._kind_name, *self._args]
