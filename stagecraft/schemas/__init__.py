"""Versioned schema loaders and validators."""

from stagecraft.schemas.script_v1 import (
    dump_document,
    dump_script,
    load_document,
    load_script,
    validate_document,
)

__all__ = [
    "load_document",
    "dump_document",
    "load_script",
    "dump_script",
    "validate_document",
]
