"""Resolved workspace documents and graph export."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from projgen.errors import WorkspaceFormatError
from projgen.graph.io import export_graph_json, load_workspace, parse_workspace_document
from projgen.graph.loader import GraphLoader
from projgen.graph.models import (
    FileElementKind,
    GraphDependency,
    LinkingStatus,
    Product,
    TargetDependencyKind,
)

DOCUMENT = {
    "workspace": {
        "name": "Shop",
        "path": "ws",
        "generation_options": {
            "shared_test_target": {
                "install_to": "Tests",
                "targets": [{"name": "SharedTests", "tests_pattern": ".*Tests", "count": 2}],
            }
        },
    },
    "projects": [
        {
            "path": "App",
            "name": "App",
            "targets": [
                {
                    "name": "App",
                    "product": "app",
                    "sources": [
                        "Sources/AppDelegate.swift",
                        {"path": "Sources/View.swift", "glob": "Sources/**/*.swift"},
                    ],
                    "resources": [{"path": "Resources/Assets", "kind": "folder_reference"}],
                    "buildable_folders": ["Features"],
                    "dependencies": [
                        {"kind": "project", "name": "Core", "path": "../Core"},
                        {"kind": "external", "name": "Alamofire", "status": "optional"},
                        {"kind": "sdk", "name": "UIKit.framework", "platform_filters": ["ios"]},
                    ],
                }
            ],
        },
        {
            "path": "Core",
            "name": "Core",
            "podspec_path": "Core.podspec",
            "targets": [{"name": "Core", "product": "framework"}],
        },
    ],
    "external_dependencies": {
        "Alamofire": [{"kind": "framework", "path": "Pods/Alamofire.framework"}],
    },
}


def test_parse_resolves_relative_paths(tmp_path: Path) -> None:
    value, external = parse_workspace_document(DOCUMENT, base_dir=tmp_path)

    root = tmp_path / "ws"
    app, core = value.projects
    target = app.targets[0]
    assert value.workspace.path == root
    assert value.workspace.projects == [root / "App", root / "Core"]
    assert app.path == root / "App"
    assert core.podspec_path == root / "Core" / "Core.podspec"
    assert target.product == Product.APP
    assert target.sources[1].glob == str(root / "App" / "Sources" / "**" / "*.swift")
    assert target.resources[0].kind == FileElementKind.FOLDER_REFERENCE
    assert target.buildable_folders[0].path == root / "App" / "Features"
    assert target.dependencies[0].kind == TargetDependencyKind.PROJECT
    assert target.dependencies[0].path == root / "Core"
    assert target.dependencies[1].status == LinkingStatus.OPTIONAL
    assert target.dependencies[2].condition.platform_filters == frozenset({"ios"})
    assert external == {
        "Alamofire": [GraphDependency.framework(root / "Pods" / "Alamofire.framework")]
    }
    shared = value.workspace.generation_options.shared_test_target
    assert shared.install_to == "Tests"
    assert shared.targets[0].count == 2


@pytest.mark.parametrize(
    "mutate",
    [
        lambda doc: doc["projects"][0]["targets"].append(
            {"name": "App", "product": "framework"}
        ),
        lambda doc: doc["projects"][0]["targets"][0].update(product="toaster"),
        lambda doc: doc["projects"][0]["targets"][0]["dependencies"].append({"kind": "project", "name": "X"}),
        lambda doc: doc.pop("workspace"),
    ],
)
def test_parse_rejects_malformed_documents(tmp_path: Path, mutate) -> None:
    document = json.loads(json.dumps(DOCUMENT))
    mutate(document)

    with pytest.raises(WorkspaceFormatError):
        parse_workspace_document(document, base_dir=tmp_path)


def test_load_workspace_from_file(tmp_path: Path) -> None:
    path = tmp_path / "workspace.json"
    path.write_text(json.dumps(DOCUMENT), encoding="utf-8")

    value, _ = load_workspace(path)

    assert value.workspace.name == "Shop"
    assert value.workspace.path == tmp_path.resolve() / "ws"


def test_load_workspace_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "workspace.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(WorkspaceFormatError):
        load_workspace(path)


def test_export_graph_json(tmp_path: Path) -> None:
    value, external = parse_workspace_document(DOCUMENT, base_dir=tmp_path)
    graph = GraphLoader(external).load(value)
    output = tmp_path / "out" / "graph.json"

    export_graph_json(graph, output)

    data = json.loads(output.read_text(encoding="utf-8"))
    ids = {node["id"] for node in data["nodes"]}
    root = tmp_path / "ws"
    assert f"target:{root / 'App'}:App" in ids
    assert f"framework:{root / 'Pods' / 'Alamofire.framework'}" in ids
    edge_key = "links" if "links" in data else "edges"
    statuses = {edge["status"] for edge in data[edge_key]}
    assert statuses == {"required", "optional"}
