"""Record the glob patterns of each target in the side table.

Once globs are expanded only concrete files remain on the targets; the
patterns are needed later to attribute deleted files.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from projgen.graph.models import (
    FileElement,
    FileElementKind,
    Project,
    SideTable,
    SourceFileGlob,
)
from projgen.mappers.base import MapResult, ProjectMapping

logger = logging.getLogger("projgen.mappers.file_globs")


def _element_patterns(elements: List[FileElement]) -> List[str]:
    patterns: List[str] = []
    for element in elements:
        if element.glob:
            pattern = element.glob
        elif element.kind == FileElementKind.GLOB:
            pattern = str(element.path)
        else:
            continue
        if pattern not in patterns:
            patterns.append(pattern)
    return patterns


class CacheTargetFileGlobsProjectMapper(ProjectMapping):
    """Stores source, resource and additional-file globs per target."""

    def map(self, value: Project, side_table: SideTable) -> MapResult[Project]:
        for target in value.targets:
            sources: Dict[Tuple[str, Tuple[str, ...]], SourceFileGlob] = {}
            for source in target.sources:
                if source.glob is None:
                    continue
                key = (source.glob, tuple(source.excluding))
                sources.setdefault(key, SourceFileGlob(source.glob, tuple(source.excluding)))

            side_table.set_sources(list(sources.values()), value.path, target.name)
            side_table.set_resources(_element_patterns(target.resources), value.path, target.name)
            side_table.set_additional_files(
                _element_patterns(target.additional_files), value.path, target.name
            )
        logger.debug("Cached file globs for %d target(s) of %s", len(value.targets), value.name)
        return MapResult(value, side_table)
