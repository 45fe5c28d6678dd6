"""Dependency graph: models, loading, queries and linting."""

from .graph import Graph
from .linter import GraphLinter, LintingIssue, Severity, check_graph_integrity
from .loader import GraphLoader
from .traverser import GraphTraverser

__all__ = [
    "Graph",
    "GraphLinter",
    "GraphLoader",
    "GraphTraverser",
    "LintingIssue",
    "Severity",
    "check_graph_integrity",
]
