"""
Tests for the build framework — registry, phases, contexts, path API.
"""

from pathlib import Path

import pytest
from pydantic import BaseModel, Field

from suite_harness.core.engine.build_context import BuildContext, generate_build_graph
from suite_harness.core.engine.contexts import ModuleContext
from suite_harness.core.engine.errors import (
    BuildFailure,
    DeclarationError,
    ModuleError,
)
from suite_harness.core.engine.module import ModuleBase, SourceFileProducer
from suite_harness.core.engine.paths import (
    expand_sources,
    extract_source_deps,
    path_for_module_out,
    path_for_output,
)
from suite_harness.core.engine.registry import ModuleTypeRegistry, default_registry
from suite_harness.core.engine.rules import CP, PackageContext
from suite_harness.core.models.build import BuildParams
from suite_harness.core.models.declaration import ModuleDeclaration

pctx = PackageContext("test")
STAMP = pctx.static_rule("stamp", "echo ${text} > $out", "text")


class FileProps(BaseModel):
    srcs: list[str] = Field(default_factory=list)
    text: str = ""


class FileModule(ModuleBase, SourceFileProducer):
    """Stamps ``text`` into <name>.txt; depends on whatever ``srcs`` references."""

    def __init__(self):
        super().__init__()
        self.add_properties(FileProps)
        self._out: list[Path] = []

    def deps_mutator(self, ctx):
        extract_source_deps(ctx, self.properties(FileProps).srcs)

    def generate_build_actions(self, ctx: ModuleContext):
        props = self.properties(FileProps)
        inputs = expand_sources(ctx, props.srcs)
        out = path_for_module_out(ctx, f"{ctx.module_name()}.txt")
        ctx.build(BuildParams(rule=STAMP, output=out, implicits=inputs, args={"text": props.text}))
        self._out = [out]

    def srcs(self):
        return list(self._out)


class PlainModule(ModuleBase):
    def generate_build_actions(self, ctx):
        pass


@pytest.fixture
def file_registry() -> ModuleTypeRegistry:
    registry = ModuleTypeRegistry()
    registry.register("file", FileModule)
    registry.register("plain", PlainModule)
    return registry


def _decl(type_, name, directory="", **props):
    return ModuleDeclaration(type=type_, directory=directory, properties={"name": name, **props})


# ── Registry ─────────────────────────────────────────────────────────


class TestModuleTypeRegistry:
    def test_register_and_get(self):
        registry = ModuleTypeRegistry()
        registry.register("plain", PlainModule)
        assert registry.get("plain") is PlainModule
        assert "plain" in registry
        assert registry.get("missing") is None

    def test_default_types(self):
        registry = default_registry()
        assert "tradefed_binary_host" in registry
        assert "java_binary_host" in registry

    def test_overwrite_keeps_last(self):
        registry = ModuleTypeRegistry()
        registry.register("x", PlainModule)
        registry.register("x", FileModule)
        assert registry.get("x") is FileModule
        assert registry.list_types() == ["x"]


# ── Load phase ───────────────────────────────────────────────────────


class TestLoadPhase:
    def test_unknown_module_type(self, config, file_registry):
        ctx = BuildContext(config, file_registry)
        with pytest.raises(BuildFailure) as exc:
            ctx.parse([_decl("nope", "a")])
        assert "unrecognized module type 'nope'" in str(exc.value)

    def test_duplicate_declaration(self, config, file_registry):
        ctx = BuildContext(config, file_registry)
        with pytest.raises(BuildFailure) as exc:
            ctx.parse([_decl("plain", "a"), _decl("plain", "a")])
        [error] = exc.value.errors
        assert isinstance(error, DeclarationError)
        assert "already defined" in str(error)

    def test_errors_collected_across_declarations(self, config, file_registry):
        ctx = BuildContext(config, file_registry)
        with pytest.raises(BuildFailure) as exc:
            ctx.parse([_decl("nope", "a"), _decl("plain", "b"), _decl("plain", "c", bogus=1)])
        assert len(exc.value.errors) == 2
        assert ctx.module("b") is not None

    def test_missing_name(self, config, file_registry):
        ctx = BuildContext(config, file_registry)
        with pytest.raises(BuildFailure) as exc:
            ctx.parse([ModuleDeclaration(type="plain", properties={})])
        assert "name" in str(exc.value.errors[0])

    def test_directory_recorded(self, config, file_registry):
        ctx = BuildContext(config, file_registry)
        ctx.parse([_decl("plain", "a", directory="x/y")])
        assert ctx.module("a").directory == Path("x/y")


# ── Dependency phase ─────────────────────────────────────────────────


class TestDependencyPhase:
    def test_undefined_dependency(self, config, file_registry):
        ctx = BuildContext(config, file_registry)
        ctx.parse([_decl("file", "a", srcs=[":ghost"])])
        with pytest.raises(BuildFailure) as exc:
            ctx.resolve_dependencies()
        [error] = exc.value.errors
        assert isinstance(error, ModuleError)
        assert "ghost" in str(error)

    def test_cycle(self, config, file_registry):
        ctx = BuildContext(config, file_registry)
        ctx.parse([_decl("file", "a", srcs=[":b"]), _decl("file", "b", srcs=[":a"])])
        ctx.resolve_dependencies()
        with pytest.raises(BuildFailure) as exc:
            ctx.prepare_build_actions()
        assert "cycle" in str(exc.value)


# ── Action phase ─────────────────────────────────────────────────────


class TestActionPhase:
    def test_producer_runs_before_consumer(self, config, file_registry):
        graph = generate_build_graph(
            [_decl("file", "consumer", srcs=[":producer"]), _decl("file", "producer", text="hi")],
            config,
            file_registry,
        )
        assert [e.module for e in graph.edges] == ["producer", "consumer"]
        consumer_edge = graph.edges_for("consumer")[0]
        assert consumer_edge.implicits == [Path("out/.intermediates/producer/producer.txt")]

    def test_non_producer_reference(self, config, file_registry):
        with pytest.raises(BuildFailure) as exc:
            generate_build_graph(
                [_decl("file", "a", srcs=[":p"]), _decl("plain", "p")], config, file_registry
            )
        assert "does not produce source files" in str(exc.value)

    def test_missing_source_file(self, config, file_registry):
        with pytest.raises(BuildFailure) as exc:
            generate_build_graph(
                [_decl("file", "a", directory="d", srcs=["nothere.txt"])], config, file_registry
            )
        assert "missing source file 'd/nothere.txt'" in str(exc.value)

    def test_source_outside_tree_rejected(self, config, file_registry, tmp_path):
        (tmp_path / "secret.txt").write_text("x")
        with pytest.raises(BuildFailure) as exc:
            generate_build_graph(
                [_decl("file", "a", directory="d", srcs=["../secret.txt"])], config, file_registry
            )
        [error] = exc.value.errors
        assert error.module == "a"
        assert "path 'd/../secret.txt' escapes the source tree" in str(error)

    def test_existing_source_file(self, config, file_registry, tmp_path):
        (tmp_path / "d").mkdir()
        (tmp_path / "d" / "in.txt").write_text("x")
        graph = generate_build_graph(
            [_decl("file", "a", directory="d", srcs=["in.txt"])], config, file_registry
        )
        assert graph.edges[0].implicits == [Path("d/in.txt")]

    def test_rule_args_must_match(self, config):
        class BadArgs(PlainModule):
            def generate_build_actions(self, ctx):
                ctx.build(BuildParams(rule=STAMP, output=Path("out/x"), args={"wrong": "1"}))

        registry = ModuleTypeRegistry()
        registry.register("bad", BadArgs)
        with pytest.raises(BuildFailure) as exc:
            generate_build_graph([_decl("bad", "b")], config, registry)
        assert "takes args ['text']" in str(exc.value)

    def test_output_required(self, config):
        class NoOutput(PlainModule):
            def generate_build_actions(self, ctx):
                ctx.build(BuildParams(rule=CP, input=Path("a")))

        registry = ModuleTypeRegistry()
        registry.register("bad", NoOutput)
        with pytest.raises(BuildFailure) as exc:
            generate_build_graph([_decl("bad", "b")], config, registry)
        assert "has no output" in str(exc.value)

    def test_duplicate_outputs(self, config):
        class SameOut(PlainModule):
            def generate_build_actions(self, ctx):
                ctx.build(BuildParams(rule=CP, input=Path("a"), output=path_for_output(ctx, "same")))

        registry = ModuleTypeRegistry()
        registry.register("same", SameOut)
        with pytest.raises(BuildFailure) as exc:
            generate_build_graph([_decl("same", "a"), _decl("same", "b")], config, registry)
        assert "also produced by module" in str(exc.value)

    def test_path_escaping_tree_rejected(self, config):
        class Escaper(PlainModule):
            def generate_build_actions(self, ctx):
                path_for_module_out(ctx, "..", "elsewhere")

        registry = ModuleTypeRegistry()
        registry.register("esc", Escaper)
        with pytest.raises(BuildFailure) as exc:
            generate_build_graph([_decl("esc", "e")], config, registry)
        assert "escapes the source tree" in str(exc.value)

    def test_rules_listed_once(self, config, file_registry):
        graph = generate_build_graph(
            [_decl("file", "a"), _decl("file", "b")], config, file_registry
        )
        assert graph.rules == [STAMP]
