"""projgen - dependency-graph core of a workspace project generator.

Layout:
- graph/: Graph model, loader, traverser (query engine), linter
- mappers/: Workspace/project/graph mapper contracts and concrete mappers
- impact/: Impact analysis engine (git diff, lockfile diff, closure)
- runtime/: Stage-based mapper pipeline and side effect applier
- config/: Pydantic configuration models and loaders
"""

__version__ = "0.3.0"
