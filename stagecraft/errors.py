"""Error taxonomy for plays, steps and compilation.

Structural errors (``UnknownStepKind``, ``OwnershipViolation``) are raised
immediately and signal a caller bug.  ``CompilationFailure`` wraps whatever
a step kind's apply function raised while beats were being rebuilt.
``ValidationFailure`` is advisory only: it is collected and reported, never
raised.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class StagecraftError(Exception):
    """Base class for every error raised by stagecraft itself."""


class UnknownStepKind(StagecraftError):
    """A Step named a kind that its Role's type does not define."""

    def __init__(self, role_name: str, type_name: Optional[str], kind_name: str) -> None:
        super().__init__(
            f"No such step '{kind_name}' for role '{role_name}' (type {type_name!r})"
        )
        self.role_name = role_name
        self.type_name = type_name
        self.kind_name = kind_name


class OwnershipViolation(StagecraftError):
    """A Step (or its Role) is not part of the Script it was handed to."""


class CompilationFailure(StagecraftError):
    """A step kind's apply function raised while compiling beats.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, step_index: int, role_name: str, kind_name: str) -> None:
        super().__init__(
            f"Step {step_index} ({role_name}.{kind_name}) failed to apply"
        )
        self.step_index = step_index
        self.role_name = role_name
        self.kind_name = kind_name


@dataclass(frozen=True)
class ValidationFailure:
    """One advisory problem reported by a step kind's check function."""

    step_index: Optional[int]
    role_name: str
    kind_name: str
    message: str

    def __str__(self) -> str:
        where = "unplaced step" if self.step_index is None else f"step {self.step_index}"
        return f"{where} ({self.role_name}.{self.kind_name}): {self.message}"
