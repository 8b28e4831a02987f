"""
Domain models — Pydantic types for the build framework.

All models are re-exported here for convenient access:

    from suite_harness.core.models import BuildEdge, BuildParams, Rule, BuildSettings
"""

from suite_harness.core.models.action import Action, Receipt
from suite_harness.core.models.build import BuildEdge, BuildParams, Rule
from suite_harness.core.models.config import ArchType, BuildSettings
from suite_harness.core.models.declaration import ModuleDeclaration

__all__ = [
    "Action",
    "ArchType",
    "BuildEdge",
    "BuildParams",
    "BuildSettings",
    "ModuleDeclaration",
    "Receipt",
    "Rule",
]
