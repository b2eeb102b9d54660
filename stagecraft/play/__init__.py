"""Play core: roles, steps, beat compilation and playback."""

from stagecraft.play.actor import Actor
from stagecraft.play.beat import Beat
from stagecraft.play.director import Director, DirectorState
from stagecraft.play.models import RoleRecord, ScriptDocument, ScriptMeta
from stagecraft.play.role import ROLE_TYPES, Role, register_role, role_type
from stagecraft.play.roles import (
    Character,
    Curtain,
    DialogueBox,
    Jukebox,
    Mural,
    PictureFrame,
    Stage,
)
from stagecraft.play.script import Script
from stagecraft.play.step import Step
from stagecraft.play.step_kind import ArgSpec, Pause, StepKind

__all__ = [
    "Actor",
    "ArgSpec",
    "Beat",
    "Character",
    "Curtain",
    "DialogueBox",
    "Director",
    "DirectorState",
    "Jukebox",
    "Mural",
    "Pause",
    "PictureFrame",
    "ROLE_TYPES",
    "Role",
    "RoleRecord",
    "Script",
    "ScriptDocument",
    "ScriptMeta",
    "Stage",
    "Step",
    "StepKind",
    "register_role",
    "role_type",
]
