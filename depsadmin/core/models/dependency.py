"""
Dependency references — what callers ask to install or remove.

A reference is either a bare name (``NamedRef``) or a resolved
``Dependency`` carrying the version range declared in a manifest.
Comparison and lookup go by name only; see ``deps_util.ref_name``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NamedRef(BaseModel):
    """A dependency known only by name (e.g. typed on the command line)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["name"] = "name"
    name: str


class Dependency(BaseModel):
    """A dependency as declared in a manifest."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pinned"] = "pinned"
    name: str
    version: str = ""
    is_global: bool = False


DependencyRef = Annotated[Union[NamedRef, Dependency], Field(discriminator="kind")]
