"""
Static rules — parameterised commands registered once per package.

    pctx = PackageContext("suite_harness")
    MY_RULE = pctx.static_rule("myRule", "cp $in $out && echo ${tag} >> $out", "tag")
"""

from __future__ import annotations

import logging

from suite_harness.core.models.build import Rule

logger = logging.getLogger(__name__)


class PackageContext:
    """Namespace for the static rules of one package."""

    def __init__(self, name: str):
        self.name = name
        self._rules: dict[str, Rule] = {}

    def static_rule(self, name: str, command: str, *args: str, description: str = "") -> Rule:
        """Define a rule.  ``args`` names the variables each edge must supply."""
        if name in self._rules:
            raise ValueError(f"rule {self.name}.{name} already defined")
        rule = Rule(package=self.name, name=name, command=command, args=args, description=description)
        self._rules[name] = rule
        logger.debug("Defined rule %s", rule.qualified_name)
        return rule

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules.values())


builtin = PackageContext("builtin")

# Identity copy.
CP = builtin.static_rule("cp", "rm -f $out && cp -f $in $out", description="cp $out")
