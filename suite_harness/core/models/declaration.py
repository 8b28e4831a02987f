"""
Module declaration model — one entry of a Blueprints.yml file.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ModuleDeclaration(BaseModel):
    """A module as written by its author.

    ``properties`` holds everything except ``type``; it always includes
    ``name``.  ``directory`` is relative to the source root and ``source``
    names the file the declaration came from.
    """

    type: str
    directory: str = ""
    source: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.properties.get("name", ""))
