"""The built-in role types.

| type           | state                                   | reset each beat |
|----------------|-----------------------------------------|-----------------|
| stage          | {}                                      | (nothing)       |
| curtain        | lowered                                 | lowered         |
| mural          | visible                                 | visible         |
| dialogue-box   | phrase, speaker, color, position        | phrase          |
| jukebox        | track                                   | (nothing)       |
| picture-frame  | pose, composites                        | (nothing)       |
| character      | as picture-frame                        | (nothing)       |

Speaker, color and position of a dialogue box persist across beats.
Presenters compare consecutive states to tell whether the speaker changed.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Optional

from stagecraft.play.role import Role, register_role
from stagecraft.play.step_kind import ArgSpec, Pause, StepKind

log = logging.getLogger(__name__)


# ── Stage ─────────────────────────────────────────────────────────────────────


@register_role("stage")
class Stage(Role):
    """Stage directions: pauses, bookmarks and notes.  Holds no state."""

    STEP_KINDS = {
        "pause": StepKind(
            name="pause",
            hint="pause and wait for a click",
            pause=Pause.HOLD,
        ),
        "bookmark": StepKind(
            name="bookmark",
            hint="mark this as a named point in the pause menu",
            args=(ArgSpec("label", "string"),),
        ),
        "note": StepKind(
            name="note",
            hint="leave a note to yourself without affecting the script",
            args=(ArgSpec("comment", "string"),),
        ),
    }


# ── Curtain ───────────────────────────────────────────────────────────────────


def _lower_curtain(role: Role, beat: Any, state: dict) -> None:
    state["lowered"] = True


@register_role("curtain")
class Curtain(Role):
    """Full-screen transition.  Lowering only ever lasts a single beat."""

    STEP_KINDS = {
        "lower": StepKind(
            name="lower",
            pause=Pause.WAIT,
            is_major_transition=True,
            apply=_lower_curtain,
        ),
    }
    LEGACY_JSON_ACTIONS = {
        "lower": ["lower"],
    }

    def generate_initial_state(self) -> dict:
        return {"lowered": False}

    def propagate_state(self, prev: dict) -> dict:
        return {**prev, "lowered": False}


# ── Mural ─────────────────────────────────────────────────────────────────────


def _show_mural(role: Role, beat: Any, state: dict) -> None:
    state["visible"] = True


@register_role("mural")
class Mural(Role):
    """Full-screen arbitrary markup, e.g. credits."""

    STEP_KINDS = {
        "show": StepKind(name="show", pause=Pause.HOLD, apply=_show_mural),
    }
    LEGACY_JSON_ACTIONS = {
        "show": ["show"],
    }

    def __init__(self, name: str, markup: str = "") -> None:
        super().__init__(name)
        self.markup = markup

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Mural":
        return cls(data["name"], data.get("markup") or "")

    def to_json(self) -> Dict[str, Any]:
        return {**super().to_json(), "markup": self.markup}

    def generate_initial_state(self) -> dict:
        return {"visible": False}

    def propagate_state(self, prev: dict) -> dict:
        return {**prev, "visible": False}


# ── Dialogue box ──────────────────────────────────────────────────────────────


@register_role("dialogue-box")
class DialogueBox(Role):
    """Shows phrases.  Driven entirely by characters' ``say`` steps."""

    def generate_initial_state(self) -> dict:
        return {
            # None hides the box.  Only lasts one beat.
            "phrase": None,
            "speaker": None,
            "color": None,
            "position": None,
        }

    def propagate_state(self, prev: dict) -> dict:
        return {**prev, "phrase": None}


# ── Jukebox ───────────────────────────────────────────────────────────────────


def _check_play(role: "Jukebox", track_name: Any) -> Optional[List[str]]:
    if not isinstance(track_name, str) or track_name not in role.tracks:
        return ["No such track!"]
    return None


def _play(role: Role, beat: Any, state: dict, track_name: Any) -> None:
    state["track"] = track_name


def _stop(role: Role, beat: Any, state: dict) -> None:
    state["track"] = None


@register_role("jukebox")
class Jukebox(Role):
    """Background music.  The current track persists until changed."""

    STEP_KINDS = {
        "play": StepKind(
            name="play",
            hint="start playing a given track",
            args=(ArgSpec("track", "track"),),
            check=_check_play,
            apply=_play,
        ),
        "stop": StepKind(name="stop", hint="stop playing", apply=_stop),
    }
    LEGACY_JSON_ACTIONS = {
        "play": ["play", "track"],
        "stop": ["stop"],
    }

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.tracks: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Jukebox":
        jukebox = cls(data["name"])
        for track_name, track_def in (data.get("tracks") or {}).items():
            if not isinstance(track_def, dict) or not track_def.get("path"):
                raise ValueError(
                    f"Track '{track_name}' of jukebox '{jukebox.name}' has no path"
                )
            jukebox.add_track(track_name, track_def["path"], track_def.get("loop", True))
        return jukebox

    @classmethod
    def from_legacy_json(cls, name: str, data: Dict[str, Any]) -> "Jukebox":
        jukebox = cls(name)
        for track_name, path in (data.get("tracks") or {}).items():
            jukebox.add_track(track_name, path)
        return jukebox

    def to_json(self) -> Dict[str, Any]:
        tracks = {name: dict(track) for name, track in self.tracks.items()}
        return {**super().to_json(), "tracks": tracks}

    def add_track(self, track_name: str, path: str, loop: bool = True) -> None:
        self.tracks[track_name] = {"path": path, "loop": loop}

    def generate_initial_state(self) -> dict:
        return {"track": None}


# ── Picture frame ─────────────────────────────────────────────────────────────


def _check_show(role: "PictureFrame", pose_name: Any, composites: Any = None) -> Optional[List[str]]:
    messages = []
    if not isinstance(pose_name, str) or pose_name not in role.poses:
        messages.append("No such pose!")
    if composites is not None and not isinstance(composites, dict):
        messages.append("Layers must be a mapping!")
    return messages or None


def _show(role: "PictureFrame", beat: Any, state: dict, pose_name: Any, composites: Any = None) -> None:
    state["pose"] = pose_name

    pose = role.poses.get(pose_name) if isinstance(pose_name, str) else None
    if pose is None:
        log.warning("No such pose %r for role %r", pose_name, role)
        return
    if composites is not None and not isinstance(composites, dict):
        log.warning("Ignoring layers %r for pose %r of role %r", composites, pose_name, role)
        return
    if pose["type"] == "composite" and composites:
        variants = state["composites"].setdefault(pose_name, {})
        for layer_name in pose["order"]:
            if layer_name in composites:
                variants[layer_name] = composites[layer_name]


def _hide(role: Role, beat: Any, state: dict) -> None:
    state["pose"] = None


@register_role("picture-frame")
class PictureFrame(Role):
    """An image slot showing one pose at a time.

    A pose is stored inflated as ``{"type": "static", "path": ...}`` or
    ``{"type": "composite", "order": [layer, ...], "layers": {layer:
    {"optional": bool, "variants": {name: path}}}}``.  On disk a static pose
    is just its path.
    """

    STEP_KINDS = {
        "show": StepKind(
            name="show",
            hint="switch to another pose",
            args=(ArgSpec("pose", "pose"), ArgSpec("layers", "pose_composite")),
            check=_check_show,
            apply=_show,
        ),
        "hide": StepKind(name="hide", hint="hide", apply=_hide),
    }
    LEGACY_JSON_ACTIONS = {
        "show": ["show", "view"],
        "hide": ["hide"],
    }

    def __init__(
        self,
        name: str,
        position: str = "default",
        anchor: str = "middle",
        offset: float = 0,
    ) -> None:
        super().__init__(name)
        self.poses: Dict[str, Dict[str, Any]] = {}
        self.position = position
        self.anchor = anchor
        self.offset = offset

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PictureFrame":
        frame = cls(
            data["name"],
            data.get("position") or "default",
            data.get("anchor") or "middle",
            data.get("offset") or 0,
        )
        for pose_name, posedef in (data.get("poses") or {}).items():
            frame.poses[pose_name] = inflate_pose(posedef)
        return frame

    @classmethod
    def from_legacy_json(cls, name: str, data: Dict[str, Any]) -> "PictureFrame":
        frame = cls(name, data.get("position") or "default")
        for pose_name, posedef in (data.get("views") or {}).items():
            frame.poses[pose_name] = inflate_pose(posedef)
        return frame

    def to_json(self) -> Dict[str, Any]:
        return {
            **super().to_json(),
            "position": self.position,
            "anchor": self.anchor,
            "offset": self.offset,
            "poses": {name: deflate_pose(pose) for name, pose in self.poses.items()},
        }

    def add_static_pose(self, pose_name: str, path: str) -> None:
        self.poses[pose_name] = {"type": "static", "path": path}

    def rename_pose(self, old_pose_name: str, new_pose_name: str) -> None:
        if old_pose_name not in self.poses:
            raise ValueError(f"No such pose '{old_pose_name}'")
        if new_pose_name in self.poses:
            raise ValueError(f"Pose '{new_pose_name}' already exists")
        self.poses[new_pose_name] = self.poses.pop(old_pose_name)

    def generate_initial_state(self) -> dict:
        # pose name → {layer name → visible variant, or False}
        composites: Dict[str, Dict[str, Any]] = {}
        for pose_name, pose in self.poses.items():
            if pose["type"] != "composite":
                continue
            composites[pose_name] = {layer_name: False for layer_name in pose["order"]}
        return {"pose": None, "composites": composites}

    def propagate_state(self, prev: dict) -> dict:
        # Steps modify composites in place, so they need their own copy
        composites = {
            pose_name: dict(variants) for pose_name, variants in prev["composites"].items()
        }
        return {**prev, "composites": composites}


def inflate_pose(posedef: Any) -> Dict[str, Any]:
    if isinstance(posedef, str):
        return {"type": "static", "path": posedef}
    if isinstance(posedef, dict) and posedef.get("type"):
        return posedef
    raise ValueError(f"Don't know how to inflate pose definition: {posedef!r}")


def deflate_pose(pose: Dict[str, Any]) -> Any:
    if pose["type"] == "static":
        return pose["path"]
    if pose["type"] == "composite":
        return pose
    raise ValueError(f"Don't know how to deflate pose definition: {pose!r}")


# ── Character ─────────────────────────────────────────────────────────────────


def _say(role: "Character", beat: Any, state: dict, phrase: Any) -> None:
    dialogue_box = role.dialogue_box
    if dialogue_box is None:
        log.warning("Character %r has no dialogue box configured", role.name)
        return

    dstate = beat.get(dialogue_box)
    dstate["color"] = role.dialogue_color
    dstate["speaker"] = role.dialogue_name
    dstate["position"] = role.dialogue_position
    dstate["phrase"] = phrase


@register_role("character")
class Character(PictureFrame):
    """A picture frame that can also speak through a dialogue box."""

    STEP_KINDS = {
        "pose": dataclasses.replace(PictureFrame.STEP_KINDS["show"], name="pose"),
        "leave": dataclasses.replace(PictureFrame.STEP_KINDS["hide"], name="leave"),
        "say": StepKind(
            name="say",
            pause=Pause.HOLD,
            args=(ArgSpec("phrase", "prose", nullable=False),),
            apply=_say,
        ),
    }
    LEGACY_JSON_ACTIONS = {
        "say": ["say", "text"],
        "pose": ["pose", "view"],
        "leave": ["leave"],
    }

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.dialogue_box: Optional[DialogueBox] = None
        self.dialogue_name: Optional[str] = None
        self.dialogue_color: Optional[str] = None
        self.dialogue_position: Optional[str] = None
        self._dialogue_box_name: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Character":
        character = super().from_json(data)
        character._dialogue_box_name = data.get("dialogue_box")
        character.dialogue_name = data.get("dialogue_name")
        character.dialogue_color = data.get("dialogue_color")
        character.dialogue_position = data.get("dialogue_position")
        return character

    @classmethod
    def from_legacy_json(cls, name: str, data: Dict[str, Any]) -> "Character":
        character = super().from_legacy_json(name, {**data, "views": data.get("poses") or {}})
        character.dialogue_name = data.get("name")
        character.dialogue_color = data.get("color")
        character.dialogue_position = data.get("position")
        return character

    def post_load(self, script: Any) -> None:
        super().post_load(script)
        if self._dialogue_box_name is None:
            return
        dialogue_box = script.role_index.get(self._dialogue_box_name)
        if not isinstance(dialogue_box, DialogueBox):
            log.warning(
                "Character %r refers to unknown dialogue box %r",
                self.name, self._dialogue_box_name,
            )
            dialogue_box = None
        self.dialogue_box = dialogue_box

    def to_json(self) -> Dict[str, Any]:
        return {
            **super().to_json(),
            # An unresolved reference is written back as the author gave it
            "dialogue_box": self.dialogue_box.name if self.dialogue_box else self._dialogue_box_name,
            "dialogue_name": self.dialogue_name,
            "dialogue_color": self.dialogue_color,
            "dialogue_position": self.dialogue_position,
        }
