"""Play document validator (validate-script command).

Structural rules are errors: a document breaking them cannot be loaded.
Step checks are advisory warnings: the play still compiles, but an author
probably made a mistake (a track or pose that does not exist).
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from stagecraft.play.role import ROLE_TYPES
from stagecraft.play.script import Script


def validate_script_rules(data: dict) -> List[str]:
    """Validate *data* against the play document rules.

    Returns a list of human-readable error strings; empty list means valid.
    Does NOT raise.
    """
    errors: List[str] = []

    role_types: Dict[str, str] = {}
    seen = set()
    roles = data.get("roles")
    if not isinstance(roles, list):
        errors.append("roles must be a list")
        roles = []
    for i, role in enumerate(roles):
        if not isinstance(role, dict):
            errors.append(f"roles[{i}] must be an object")
            continue
        name = role.get("name")
        type_name = role.get("type")
        if not name or not isinstance(name, str):
            errors.append(f"roles[{i}] must have a 'name'")
            continue
        if name in seen:
            errors.append(f"roles[{i}] reuses the name {name!r}")
            continue
        seen.add(name)
        if not isinstance(type_name, str) or type_name not in ROLE_TYPES:
            errors.append(
                f"roles[{i}].type must be one of {sorted(ROLE_TYPES)}, got {type_name!r}"
            )
            continue
        role_types[name] = type_name

    # Characters speak through a dialogue box declared elsewhere in the list
    for i, role in enumerate(roles):
        if not isinstance(role, dict) or role.get("type") != "character":
            continue
        box_name = role.get("dialogue_box")
        if box_name is not None and role_types.get(box_name) != "dialogue-box":
            errors.append(
                f"roles[{i}].dialogue_box {box_name!r} is not a dialogue-box role"
            )

    steps = data.get("steps")
    if not isinstance(steps, list):
        errors.append("steps must be a list")
        steps = []
    for i, step in enumerate(steps):
        if not isinstance(step, list) or len(step) < 2:
            errors.append(f"steps[{i}] must be a list of [role, kind, args...]")
            continue
        role_name, kind_name, *args = step
        type_name = role_types.get(role_name) if isinstance(role_name, str) else None
        if type_name is None:
            errors.append(f"steps[{i}] refers to unknown role {role_name!r}")
            continue
        kind = ROLE_TYPES[type_name].STEP_KINDS.get(kind_name) if isinstance(kind_name, str) else None
        if kind is None:
            errors.append(
                f"steps[{i}] kind {kind_name!r} is not defined for {type_name} roles"
            )
            continue
        if len(args) > len(kind.args):
            errors.append(
                f"steps[{i}] {kind_name!r} takes {len(kind.args)} argument(s), got {len(args)}"
            )

    return errors


def collect_step_warnings(data: dict) -> List[str]:
    """Build the play and return its step check messages.

    Only meaningful once validate_script_rules(data) returned [].
    """
    script = Script.from_json(data)
    return [str(failure) for failure in script.check_steps()]


def validate_script_file(script_path: Path) -> List[str]:
    """Load JSON from *script_path* and run validate_script_rules().

    Raises:
        ValueError: if the file is missing or contains invalid JSON.
    """
    data = load_json_object(script_path)
    return validate_script_rules(data)


def load_json_object(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ValueError(f"Script file not found: {path}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Script must be a JSON object")
    return data
