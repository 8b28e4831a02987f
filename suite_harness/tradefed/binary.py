"""
tradefed_binary_host — a java_binary_host that identifies a test suite.

Each declaration is expanded at load time into two modules:

    <name>        the host binary, with the harness libraries appended to
                  ``libs`` and ``:<name>-gen`` appended to ``java_resources``
    <name>-gen    emits test-suite-info.properties, and a copy of
                  DynamicConfig.xml as <name>.dynamic when one sits next
                  to the declaration

The properties file is written by a rule at build time, so the build
number is read when the edge runs and never baked into the graph.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from suite_harness.core.engine.contexts import LoadHookContext, ModuleContext
from suite_harness.core.engine.module import ModuleBase, SourceFileProducer, add_load_hook
from suite_harness.core.engine.paths import existent_path_for_source, path_for_module_out
from suite_harness.core.engine.rules import CP, PackageContext
from suite_harness.core.models.build import BuildParams
from suite_harness.java.binary import java_binary_host_factory

logger = logging.getLogger(__name__)

pctx = PackageContext("suite_harness")

GEN_SUFFIX = "-gen"
SUITE_INFO_FILE = "test-suite-info.properties"
DYNAMIC_CONFIG_FILE = "DynamicConfig.xml"
DYNAMIC_CONFIG_SUFFIX = ".dynamic"

# Libraries every tradefed_binary_host links against.
REQUIRED_LIBS: tuple[str, ...] = (
    "tradefed",
    "tradefed-test-framework",
    "loganalysis",
    "hosttestlib",
    "compatibility-host-util",
)

TRADEFED_BINARY_GEN_RULE = pctx.static_rule(
    "tradefedBinaryGenRule",
    "rm -f $out && touch $out && "
    'echo "# This file is auto generated by Android.mk. Do not modify." >> $out && '
    'echo "build_number = $$(cat ${buildNumberFile})" >> $out && '
    'echo "target_arch = ${arch}" >> $out && '
    'echo "name = ${name}" >> $out && '
    'echo "fullname = ${fullname}" >> $out && '
    'echo "version = ${version}" >> $out',
    "buildNumberFile",
    "arch",
    "name",
    "fullname",
    "version",
    description="suite info $out",
)


class TradefedBinaryProperties(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    short_name: str
    full_name: str
    version: str
    prepend_platform_version_name: bool = Field(
        default=False,
        validation_alias=AliasChoices("prepend_platform_version_name", "prepend_platform_version"),
    )


def tradefed_binary_factory() -> ModuleBase:
    """A java_binary_host carrying TradefedBinaryProperties and the expansion hook."""
    module = java_binary_host_factory()
    module.add_properties(TradefedBinaryProperties)
    add_load_hook(module, tradefed_binary_load_hook)
    return module


def tradefed_binary_load_hook(ctx: LoadHookContext) -> None:
    """Create the ``-gen`` sibling and wire its outputs into the binary."""
    tfb = ctx.properties(TradefedBinaryProperties)
    gen_name = ctx.module_name() + GEN_SUFFIX
    version = tfb.version
    if tfb.prepend_platform_version_name:
        version = ctx.config().platform_version_name() + tfb.version

    ctx.create_module(
        tradefed_binary_gen_factory,
        TradefedBinaryGenProperties(
            name=gen_name,
            short_name=tfb.short_name,
            full_name=tfb.full_name,
            version=version,
        ),
    )

    ctx.append_properties(
        {
            "libs": list(REQUIRED_LIBS),
            "java_resources": [":" + gen_name],
        }
    )
    logger.debug("Expanded %s into %s (version %s)", ctx.module_name(), gen_name, version)


class TradefedBinaryGenProperties(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    short_name: str
    full_name: str
    version: str


class TradefedBinaryGen(ModuleBase, SourceFileProducer):
    """Generates the suite metadata a tradefed_binary_host packages."""

    def __init__(self) -> None:
        super().__init__()
        self.add_properties(TradefedBinaryGenProperties)
        self._gen: list[Path] = []

    def generate_build_actions(self, ctx: ModuleContext) -> None:
        props = self.properties(TradefedBinaryGenProperties)
        config = ctx.config()
        build_number_file = config.build_number_file()

        output_file = path_for_module_out(ctx, SUITE_INFO_FILE)
        ctx.build(
            BuildParams(
                rule=TRADEFED_BINARY_GEN_RULE,
                output=output_file,
                order_only=[build_number_file],
                args={
                    "buildNumberFile": str(build_number_file),
                    "arch": str(config.primary_device_arch()),
                    "name": props.short_name,
                    "fullname": props.full_name,
                    "version": props.version,
                },
            )
        )
        self._gen = [output_file]

        dynamic_config = existent_path_for_source(ctx, ctx.module_dir(), DYNAMIC_CONFIG_FILE)
        if dynamic_config is not None:
            parent_name = ctx.module_name().removesuffix(GEN_SUFFIX)
            copy_file = path_for_module_out(ctx, parent_name + DYNAMIC_CONFIG_SUFFIX)
            ctx.build(BuildParams(rule=CP, input=dynamic_config, output=copy_file))
            self._gen.append(copy_file)

    def srcs(self) -> list[Path]:
        return list(self._gen)


def tradefed_binary_gen_factory() -> TradefedBinaryGen:
    return TradefedBinaryGen()
