"""Serialized play document, the stable on-disk contract.

    {
      "meta":  {title, subtitle, author, created, modified, published,
                width, height, stagecraft_version},
      "roles": [{"name": ..., "type": ..., <type-specific fields>}, ...],
      "steps": [[role name, step kind name, arg, ...], ...]
    }

Roles keep their type-specific fields as pydantic extras (extra="allow"); the
role classes themselves know how to read them.  Meta ignores unknown fields
so newer documents still load.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEMA_VERSION = "1.0.0"
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600


class ScriptMeta(BaseModel):
    """Play metadata.  Dates are ISO 8601 strings supplied by the caller."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    created: Optional[str] = None
    modified: Optional[str] = None
    published: Optional[str] = None
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    stagecraft_version: Optional[str] = None


class RoleRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    type: str


class ScriptDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    schema_version: str = SCHEMA_VERSION
    meta: ScriptMeta = Field(default_factory=ScriptMeta)
    roles: List[RoleRecord] = []
    steps: List[List[Any]] = []

    @field_validator("roles")
    @classmethod
    def _unique_role_names(cls, roles: List[RoleRecord]) -> List[RoleRecord]:
        seen = set()
        for record in roles:
            if record.name in seen:
                raise ValueError(f"duplicate role name '{record.name}'")
            seen.add(record.name)
        return roles

    @field_validator("steps")
    @classmethod
    def _step_records_have_role_and_kind(cls, steps: List[List[Any]]) -> List[List[Any]]:
        for i, record in enumerate(steps):
            if len(record) < 2 or not all(isinstance(v, str) for v in record[:2]):
                raise ValueError(
                    f"step {i} must start with a role name and a step kind name"
                )
        return steps
