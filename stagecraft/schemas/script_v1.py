"""Play document schema v1.0.0: load, dump, validate.

Canonical JSON (sort_keys=True) ensures byte-identical serialization of
identical documents regardless of dict insertion order.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from stagecraft.play.models import SCHEMA_VERSION, ScriptDocument
from stagecraft.play.script import Script

__all__ = [
    "SCHEMA_VERSION",
    "dump_document",
    "dump_script",
    "load_document",
    "load_script",
    "validate_document",
]

Source = Union[str, bytes, dict, Path]


def _read(source: Source) -> Any:
    if isinstance(source, Path):
        return json.loads(source.read_text(encoding="utf-8"))
    if isinstance(source, (str, bytes)):
        return json.loads(source)
    return source


def load_document(source: Source) -> ScriptDocument:
    """Parse a ScriptDocument from JSON string, bytes, dict, or file Path.

    Raises:
        ValidationError: data does not conform to the document schema.
        FileNotFoundError: Path does not exist.
    """
    return ScriptDocument.model_validate(_read(source))


def dump_document(document: ScriptDocument, *, indent: int = 2) -> str:
    """Serialize a ScriptDocument to canonical JSON (sort_keys=True, indent=2)."""
    raw = json.loads(document.model_dump_json())
    return json.dumps(raw, sort_keys=True, indent=indent, ensure_ascii=False)


def load_script(source: Source) -> Script:
    """Load a document and build a compiled Script from it."""
    return Script.from_json(load_document(source))


def dump_script(script: Script, *, modified: Optional[str] = None, indent: int = 2) -> str:
    """Serialize a Script to canonical JSON.  *modified* is stamped verbatim."""
    return dump_document(script.to_document(modified), indent=indent)


def validate_document(data: dict) -> List[str]:
    """Validate a raw dict against the document schema.

    Returns a list of human-readable error strings (empty list = valid).
    Does not raise.
    """
    try:
        ScriptDocument.model_validate(data)
        return []
    except ValidationError as exc:
        return [f"{e['loc']}: {e['msg']}" for e in exc.errors()]
