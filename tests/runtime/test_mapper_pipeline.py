"""Pipeline staging, side effect application and failure behaviour."""

from __future__ import annotations

from pathlib import Path

import pytest

from projgen.config.schema import ImpactAnalysisConfig, PipelineConfig
from projgen.errors import ErrorType, NoProjectError, PipelineError
from projgen.graph.models import (
    DescriptorState,
    DirectoryDescriptor,
    FileDescriptor,
    GenerationOptions,
    Product,
    Project,
    SharedTestTarget,
    SharedTestTargetOptions,
    SideTable,
    SourceFile,
    Target,
    TargetDependency,
    Workspace,
    WorkspaceWithProjects,
)
from projgen.impact.engine import ImpactAnalyzer
from projgen.mappers import (
    CacheTargetFileGlobsProjectMapper,
    DeleteDerivedDirectoryWorkspaceMapper,
    GenerateSharedTestTargetMapper,
    GraphMapping,
    ImpactAnalysisGraphMapper,
    SequentialGraphMapper,
    SequentialWorkspaceMapper,
    TreeShakePrunedTargetsGraphMapper,
)
from projgen.runtime import MapperPipeline, PipelineStage, PipelineState, SideEffectApplier


def _workspace(root: Path, need_app_host: bool = False) -> WorkspaceWithProjects:
    projects = []
    for name in ("A", "B"):
        path = root / name
        projects.append(
            Project(
                path=path,
                name=name,
                targets=[
                    Target(
                        name=name,
                        product=Product.FRAMEWORK,
                        sources=[SourceFile(path / "Sources" / f"{name}.swift")],
                    ),
                    Target(
                        name=f"{name}Tests",
                        product=Product.UNIT_TESTS,
                        dependencies=[TargetDependency.target(name)],
                        sources=[SourceFile(path / "Tests" / f"{name}Tests.swift")],
                    ),
                ],
            )
        )
    projects.append(Project(path=root / "Tests", name="Tests"))
    return WorkspaceWithProjects(
        workspace=Workspace(
            path=root,
            name="W",
            generation_options=GenerationOptions(
                SharedTestTargetOptions(
                    install_to="Tests",
                    targets=[
                        SharedTestTarget(
                            name="SharedTests",
                            tests_pattern=".*Tests",
                            count=2,
                            need_app_host=need_app_host,
                        )
                    ],
                )
            ),
        ),
        projects=projects,
    )


class _Failing(GraphMapping):
    def map(self, value, side_table):
        raise ValueError("boom")


def test_failure_applies_nothing(workspace_root: Path) -> None:
    derived = workspace_root / "A" / "Derived"
    derived.mkdir(parents=True)
    (derived / "stale.swift").write_text("// stale", encoding="utf-8")
    pipeline = MapperPipeline(
        workspace_mapper=DeleteDerivedDirectoryWorkspaceMapper(),
        graph_mapper=_Failing(),
    )

    with pytest.raises(PipelineError) as excinfo:
        pipeline.run(_workspace(workspace_root))

    assert excinfo.value.stage == PipelineStage.GRAPH.name
    assert excinfo.value.discarded == 1
    assert isinstance(excinfo.value.cause, ValueError)
    assert (derived / "stale.swift").exists()


def test_mapper_error_keeps_its_category(workspace_root: Path) -> None:
    value = _workspace(workspace_root)
    value.workspace.generation_options.shared_test_target.install_to = "Missing"
    pipeline = MapperPipeline(workspace_mapper=GenerateSharedTestTargetMapper())

    with pytest.raises(PipelineError) as excinfo:
        pipeline.run(value)

    assert excinfo.value.stage == "WORKSPACE"
    assert isinstance(excinfo.value.cause, NoProjectError)
    assert excinfo.value.error_type == ErrorType.ABORT


def test_default_pipeline_writes_app_host_files(workspace_root: Path) -> None:
    stale = workspace_root / "Tests" / "Derived" / "Old"
    stale.mkdir(parents=True)

    result = MapperPipeline.from_config(PipelineConfig()).run(
        _workspace(workspace_root, need_app_host=True)
    )

    derived = workspace_root / "Tests" / "Derived" / "SharedTestsAppHost"
    assert (derived / "Sources" / "main.swift").read_text(encoding="utf-8").startswith("import")
    assert (derived / "LaunchScreen.storyboard").exists()
    assert not stale.exists()
    assert result.applied == len(result.side_effects) == 3
    assert result.impact is None
    assert result.graph.target(workspace_root / "A", "ATestsProjgenGenerated") is not None


def test_side_effects_can_be_skipped(workspace_root: Path) -> None:
    config = PipelineConfig(apply_side_effects=False)

    result = MapperPipeline.from_config(config).run(_workspace(workspace_root, need_app_host=True))

    assert result.applied == 0
    assert len(result.side_effects) == 2
    assert not (workspace_root / "Tests" / "Derived").exists()


def test_pipeline_with_impact_analysis_prunes_wrappers(workspace_root: Path, fake_git) -> None:
    git = fake_git(changed={"A/Sources/A.swift"})
    pipeline = MapperPipeline(
        workspace_mapper=SequentialWorkspaceMapper([GenerateSharedTestTargetMapper()]),
        project_mapper=CacheTargetFileGlobsProjectMapper(),
        graph_mapper=SequentialGraphMapper(
            [
                ImpactAnalysisGraphMapper(
                    ImpactAnalysisConfig(target_ref="main"),
                    analyzer_factory=lambda g, s, c: ImpactAnalyzer(g, s, c, git=git),
                ),
                TreeShakePrunedTargetsGraphMapper(),
            ]
        ),
    )

    result = pipeline.run(_workspace(workspace_root))

    graph = result.graph
    assert result.impact is not None
    assert [key.name for key in result.impact.pruned] == ["BTestsProjgenGenerated"]
    assert graph.target(workspace_root / "A", "ATestsProjgenGenerated") is not None
    assert graph.target(workspace_root / "B", "BTestsProjgenGenerated") is None
    assert graph.target(workspace_root / "B", "BTests") is not None
    hosts = graph.projects[workspace_root / "Tests"].targets
    assert sorted(t.name for t in hosts) == ["SharedTests", "SharedTests2"]
    assert sum(len(graph.dependencies[n]) for n in graph.target_nodes() if n.path == workspace_root / "Tests") == 1


def test_stage_order_is_recorded(workspace_root: Path) -> None:
    pipeline = MapperPipeline()
    state = PipelineState(workspace=_workspace(workspace_root), side_table=SideTable())
    stages = pipeline._create_stages(state)
    for stage in PipelineStage:
        stages[stage].run()

    assert state.completed_stages == list(PipelineStage)
    assert state.graph is not None


def test_applier_handles_files_and_directories(tmp_path: Path) -> None:
    target = tmp_path / "out" / "a.txt"
    doomed = tmp_path / "doomed"
    doomed.mkdir()
    (doomed / "x").write_text("x", encoding="utf-8")

    applied = SideEffectApplier().apply(
        [
            FileDescriptor(target, b"hello"),
            DirectoryDescriptor(doomed, DescriptorState.ABSENT),
            DirectoryDescriptor(tmp_path / "made"),
            FileDescriptor(tmp_path / "never-existed", state=DescriptorState.ABSENT),
        ]
    )

    assert applied == 4
    assert target.read_bytes() == b"hello"
    assert not doomed.exists()
    assert (tmp_path / "made").is_dir()


def test_applier_dry_run_touches_nothing(tmp_path: Path) -> None:
    applied = SideEffectApplier(dry_run=True).apply([FileDescriptor(tmp_path / "a.txt", b"x")])

    assert applied == 1
    assert not (tmp_path / "a.txt").exists()
