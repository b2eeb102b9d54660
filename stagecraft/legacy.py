"""Loader for the legacy play format.

Legacy plays look like::

    {
      "title": ..., "subtitle": ..., "date": ...,
      "actors": {"<name>": {"type": "curtain" | "jukebox" | "spot" | "character", ...}},
      "script": [{"actor": "<name>", "action": "<action>", <arg keys>...}, ...]
    }

They have an implicit dialogue box (``dialogue``) that every character
speaks through, and an implicit stage (``stage``) that receives actor-less
pauses.  Each role type's LEGACY_JSON_ACTIONS table maps a legacy action to
``[step kind, legacy arg keys...]``.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Type, Union

from stagecraft.play.role import Role
from stagecraft.play.roles import Character, Curtain, DialogueBox, Jukebox, PictureFrame, Stage
from stagecraft.play.script import Script
from stagecraft.play.step import Step

log = logging.getLogger(__name__)

LEGACY_ROLE_TYPES: Dict[str, Type[Role]] = {
    "curtain": Curtain,
    "jukebox": Jukebox,
    "spot": PictureFrame,
    "character": Character,
}


def load_legacy_script(data: Dict[str, Any]) -> Script:
    """Build a compiled Script from a legacy play dict.

    Raises:
        ValueError: unknown actor type, unknown actor, or unknown action.
    """
    script = Script()
    script.title = data.get("title") or None
    script.subtitle = data.get("subtitle") or None
    script.published = data.get("date") or None

    dialogue_box = DialogueBox("dialogue")
    script._add_role(dialogue_box)
    stage = Stage("stage")
    script._add_role(stage)

    for name, role_def in (data.get("actors") or {}).items():
        cls = LEGACY_ROLE_TYPES.get(role_def.get("type"))
        if cls is None:
            raise ValueError(f"No such role type: {role_def.get('type')}")
        role = cls.from_legacy_json(name, role_def)
        if isinstance(role, Character):
            role.dialogue_box = dialogue_box
        script._add_role(role)

    steps: List[Step] = []
    for i, legacy_step in enumerate(data.get("script") or []):
        actor_name = legacy_step.get("actor")
        action = legacy_step.get("action")
        if not actor_name:
            if action == "pause":
                steps.append(Step(stage, "pause"))
            else:
                log.warning("Skipping unsupported actor-less action %r at %d", action, i)
            continue

        role = script.role_index.get(actor_name)
        if role is None:
            raise ValueError(f"Legacy step {i} refers to unknown actor '{actor_name}'")
        mapping = type(role).LEGACY_JSON_ACTIONS.get(action)
        if mapping is None:
            raise ValueError(f"Legacy step {i}: {actor_name} has no action '{action}'")
        kind_name, *arg_keys = mapping
        steps.append(Step(role, kind_name, [legacy_step.get(key) for key in arg_keys]))

    script._set_steps(steps)
    log.info(
        "Converted legacy play %r: %d roles, %d steps",
        script.title, len(script.roles), len(script.steps),
    )
    return script


def load_legacy_file(path: Union[str, Path]) -> Script:
    return load_legacy_script(json.loads(Path(path).read_text(encoding="utf-8")))
