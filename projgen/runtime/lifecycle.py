"""Stage definitions of a generation run.

Every run follows Workspace→Project→Load→Graph→Apply.
"""

from enum import Enum, auto


class PipelineStage(Enum):
    """Stages of the mapper pipeline.

    - WORKSPACE: workspace mappers over the workspace and all projects
    - PROJECT: project mappers, once per project
    - LOAD: build the dependency graph
    - GRAPH: graph mappers (impact analysis among them)
    - APPLY: apply the collected side effects
    """

    WORKSPACE = auto()
    PROJECT = auto()
    LOAD = auto()
    GRAPH = auto()
    APPLY = auto()

    def __str__(self) -> str:
        return self.name.title()
