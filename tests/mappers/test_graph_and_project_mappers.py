"""Derived-directory cleanup, glob caching, combinators and impact graph mappers."""

from __future__ import annotations

from pathlib import Path

from projgen.config.schema import ImpactAnalysisConfig
from projgen.graph.models import (
    DescriptorState,
    DirectoryDescriptor,
    FileElement,
    FileElementKind,
    GenerationOptions,
    GraphDependency,
    Product,
    Project,
    SharedTestTargetOptions,
    SideTable,
    SourceFile,
    SourceFileGlob,
    Target,
    TargetDependency,
    TargetFlags,
    TargetKey,
    Workspace,
    WorkspaceWithProjects,
)
from projgen.impact.engine import ImpactAnalyzer
from projgen.mappers import (
    CacheTargetFileGlobsProjectMapper,
    DeleteDerivedDirectoryWorkspaceMapper,
    ImpactAnalysisGraphMapper,
    MapResult,
    ProjectMapping,
    ProjectWorkspaceMapper,
    SequentialProjectMapper,
    TreeShakePrunedTargetsGraphMapper,
)


def test_delete_derived_directory_only_for_existing(workspace_root: Path) -> None:
    (workspace_root / "A" / "Derived").mkdir(parents=True)
    (workspace_root / "B").mkdir()
    value = WorkspaceWithProjects(
        Workspace(path=workspace_root, name="W"),
        [
            Project(path=workspace_root / "A", name="A"),
            Project(path=workspace_root / "B", name="B"),
        ],
    )

    result = DeleteDerivedDirectoryWorkspaceMapper().map(value, SideTable())

    assert result.side_effects == [
        DirectoryDescriptor(workspace_root / "A" / "Derived", DescriptorState.ABSENT)
    ]
    assert (workspace_root / "A" / "Derived").is_dir()


def test_file_globs_are_cached(workspace_root: Path) -> None:
    project_path = workspace_root / "A"
    pattern = str(project_path / "Sources" / "**" / "*.swift")
    target = Target(
        name="A",
        product=Product.FRAMEWORK,
        sources=[
            SourceFile(project_path / "Sources" / "a.swift", glob=pattern, excluding=("x",)),
            SourceFile(project_path / "Sources" / "b.swift", glob=pattern, excluding=("x",)),
            SourceFile(project_path / "Main.swift"),
        ],
        resources=[
            FileElement.file(project_path / "Res" / "a.png", glob=str(project_path / "Res" / "*.png")),
            FileElement.folder_reference(project_path / "Assets"),
        ],
        additional_files=[FileElement(project_path / "Docs" / "*.md", FileElementKind.GLOB)],
    )
    side_table = SideTable()

    CacheTargetFileGlobsProjectMapper().map(Project(project_path, "A", [target]), side_table)

    assert side_table.sources(project_path, "A") == [SourceFileGlob(pattern, ("x",))]
    assert side_table.resources(project_path, "A") == [str(project_path / "Res" / "*.png")]
    assert side_table.additional_files(project_path, "A") == [str(project_path / "Docs" / "*.md")]


class _Rename(ProjectMapping):
    def __init__(self, suffix: str) -> None:
        self.suffix = suffix

    def map(self, value, side_table):
        value.name += self.suffix
        return MapResult(value, side_table, [DirectoryDescriptor(value.path / self.suffix)])


def test_sequential_project_mapper_lifted_to_workspace(workspace_root: Path) -> None:
    value = WorkspaceWithProjects(
        Workspace(path=workspace_root, name="W"),
        [Project(path=workspace_root / "A", name="A"), Project(path=workspace_root / "B", name="B")],
    )
    mapper = ProjectWorkspaceMapper(SequentialProjectMapper([_Rename("1"), _Rename("2")]))

    result = mapper.map(value, SideTable())

    assert [p.name for p in result.value.projects] == ["A12", "B12"]
    assert [d.path.name for d in result.side_effects] == ["1", "2", "1", "2"]


def _shared_graph(make_graph, make_target, workspace_root: Path):
    tests = workspace_root / "Tests"
    app = workspace_root / "App"
    workspace = Workspace(
        path=workspace_root,
        name="W",
        generation_options=GenerationOptions(SharedTestTargetOptions(install_to="Tests")),
    )
    graph = make_graph(
        {
            "App": [
                make_target(app, "Kit"),
                make_target(app, "KitTestsProjgenGenerated", [TargetDependency.target("Kit")]),
                make_target(app, "OtherTestsProjgenGenerated"),
            ],
            "Tests": [
                make_target(
                    tests,
                    "Shared",
                    [
                        TargetDependency.project("KitTestsProjgenGenerated", app),
                        TargetDependency.project("OtherTestsProjgenGenerated", app),
                    ],
                    product=Product.UNIT_TESTS,
                )
            ],
        },
        workspace=workspace,
    )
    side_table = SideTable()
    side_table.insert_flags(TargetFlags.SHARED_TEST_TARGET, tests, "Shared")
    for name in ("KitTestsProjgenGenerated", "OtherTestsProjgenGenerated"):
        side_table.insert_flags(TargetFlags.SHARED_TEST_TARGET_GENERATED_FRAMEWORK, app, name)
    return graph, side_table, app, tests


def test_impact_mapper_prunes_then_tree_shakes(make_graph, make_target, workspace_root, fake_git) -> None:
    graph, side_table, app, tests = _shared_graph(make_graph, make_target, workspace_root)
    git = fake_git(changed={"App/Sources/Kit/main.swift"})
    mapper = ImpactAnalysisGraphMapper(
        ImpactAnalysisConfig(target_ref="main"),
        analyzer_factory=lambda g, s, c: ImpactAnalyzer(g, s, c, git=git),
    )

    mapper.map(graph, side_table)
    TreeShakePrunedTargetsGraphMapper().map(graph, side_table)

    assert mapper.last_result.pruned == [TargetKey(app, "OtherTestsProjgenGenerated")]
    assert graph.target(app, "OtherTestsProjgenGenerated") is None
    assert graph.dependencies[GraphDependency.target("Shared", tests)] == {
        GraphDependency.target("KitTestsProjgenGenerated", app)
    }
    graph.check_integrity()


def test_impact_mapper_without_hosts_is_noop(make_graph, make_target, workspace_root, fake_git) -> None:
    graph, _, app, _ = _shared_graph(make_graph, make_target, workspace_root)
    calls = []

    def factory(g, s, c):
        calls.append(c)
        return ImpactAnalyzer(g, s, c, git=fake_git())

    mapper = ImpactAnalysisGraphMapper(ImpactAnalysisConfig(target_ref="main"), analyzer_factory=factory)
    mapper.map(graph, SideTable())

    assert calls == []
    assert mapper.last_result is None
    assert graph.target(app, "OtherTestsProjgenGenerated") is not None


def test_impact_mapper_with_unknown_install_project(make_graph, make_target, workspace_root) -> None:
    graph, side_table, _, _ = _shared_graph(make_graph, make_target, workspace_root)
    graph.workspace.generation_options.shared_test_target.install_to = "Elsewhere"
    mapper = ImpactAnalysisGraphMapper(ImpactAnalysisConfig(target_ref="main"))

    mapper.map(graph, side_table)

    assert mapper.last_result is None
