"""
java_binary_host — a host-side Java binary.

Only resource packaging is modelled: ``java_resources`` (files in the
module directory or ``:module`` references to source-file producers)
are zipped into ``<name>.jar`` under the module's output directory.
``libs`` are recorded for the classpath and deduplicated by name.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from suite_harness.core.engine.contexts import BottomUpMutatorContext, ModuleContext
from suite_harness.core.engine.module import ModuleBase
from suite_harness.core.engine.paths import expand_sources, extract_source_deps, path_for_module_out
from suite_harness.core.engine.proptools import first_unique
from suite_harness.core.engine.rules import PackageContext
from suite_harness.core.models.build import BuildParams

pctx = PackageContext("java")

JAVA_RESOURCE_JAR = pctx.static_rule(
    "resourceJar",
    "rm -f $out && ${python} -m zipfile -c $out $in",
    "python",
    description="jar $out",
)


class JavaBinaryProperties(BaseModel):
    srcs: list[str] = Field(default_factory=list)
    libs: list[str] = Field(default_factory=list)
    java_resources: list[str] = Field(default_factory=list)
    main_class: str | None = None


class JavaBinaryHost(ModuleBase):
    """Host Java binary with packaged resources."""

    def __init__(self) -> None:
        super().__init__()
        self.add_properties(JavaBinaryProperties)
        self.output_jar: Path | None = None

    @property
    def java_properties(self) -> JavaBinaryProperties:
        return self.properties(JavaBinaryProperties)

    def libs(self) -> list[str]:
        """Classpath libraries, first declaration wins."""
        return first_unique(self.java_properties.libs)

    def deps_mutator(self, ctx: BottomUpMutatorContext) -> None:
        extract_source_deps(ctx, self.java_properties.java_resources)

    def generate_build_actions(self, ctx: ModuleContext) -> None:
        resources = expand_sources(ctx, self.java_properties.java_resources)
        self.output_jar = None
        if not resources:
            return

        jar = path_for_module_out(ctx, f"{ctx.module_name()}.jar")
        ctx.build(
            BuildParams(
                rule=JAVA_RESOURCE_JAR,
                output=jar,
                inputs=resources,
                args={"python": ctx.config().host_python()},
            )
        )
        self.output_jar = jar


def java_binary_host_factory() -> JavaBinaryHost:
    return JavaBinaryHost()
