"""Synthesis of shared unit-test hosts.

Running hundreds of small unit-test bundles is slow. When a workspace opts
in, each matching unit-test target is wrapped into a static framework and
the wrappers are linked into a handful of shared test hosts living in the
``install_to`` project. Impact analysis later detaches the wrappers whose
tests are unaffected by a change.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import List, Optional, Pattern, Tuple

from projgen.errors import InvalidPatternError, NoProjectError, NoTargetError
from projgen.graph.models import (
    Product,
    Project,
    SharedTestTarget,
    SideTable,
    Target,
    TargetDependency,
    TargetDependencyKind,
    TargetFlags,
    WorkspaceWithProjects,
)
from projgen.mappers.base import MapResult, WorkspaceMapping

logger = logging.getLogger("projgen.mappers.shared_test_target")

GENERATED_SUFFIX = "ProjgenGenerated"
BUNDLE_ID_PREFIX = "com.projgen"


def _compile(pattern: str) -> Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidPatternError(pattern) from exc


def _is_app_host_dependency(dependency: TargetDependency) -> bool:
    if dependency.kind == TargetDependencyKind.PROJECT:
        return bool(dependency.name) and dependency.name.endswith("-AppHost")
    if dependency.kind == TargetDependencyKind.TARGET:
        return bool(dependency.name) and dependency.name.startswith("AppHost-")
    return False


def generate_framework(target: Target) -> Target:
    """Wrap a unit-test target into a static framework carrying its sources."""
    settings = dict(target.settings)
    settings["ENABLE_TESTING_SEARCH_PATHS"] = "YES"
    return replace(
        target,
        name=target.name + GENERATED_SUFFIX,
        product=Product.STATIC_FRAMEWORK,
        product_name=target.product_name,
        bundle_id=f"{BUNDLE_ID_PREFIX}.{target.name.replace('_', '-')}{GENERATED_SUFFIX}",
        dependencies=[d for d in target.dependencies if not _is_app_host_dependency(d)],
        sources=list(target.sources),
        resources=list(target.resources),
        additional_files=list(target.additional_files),
        buildable_folders=list(target.buildable_folders),
        settings=settings,
        prune=False,
    )


def generate_app_host(shared: SharedTestTarget) -> Target:
    name = f"{shared.name}AppHost"
    return Target(
        name=name,
        product=Product.APP,
        bundle_id=f"{BUNDLE_ID_PREFIX}.{name}",
        settings={"INFOPLIST_KEY_UILaunchStoryboardName": "LaunchScreen"},
    )


def _buckets(count: int, hosts: int) -> List[Tuple[int, int]]:
    """Split ``count`` items into ``hosts`` contiguous, near-equal slices."""
    size, remainder = divmod(count, hosts)
    slices = []
    start = 0
    for _ in range(hosts):
        end = start + size + (1 if remainder > 0 else 0)
        slices.append((start, end))
        start = end
        remainder -= 1
    return slices


class GenerateSharedTestTargetMapper(WorkspaceMapping):
    """Creates shared test hosts and generated wrapper frameworks."""

    def map(
        self, value: WorkspaceWithProjects, side_table: SideTable
    ) -> MapResult[WorkspaceWithProjects]:
        options = value.workspace.generation_options.shared_test_target
        if options is None:
            return MapResult(value, side_table)

        value.projects.sort(key=lambda p: p.name)
        for project in value.projects:
            project.targets.sort(key=lambda t: t.name)

        install = next((p for p in value.projects if p.name == options.install_to), None)
        if install is None:
            raise NoProjectError(options.install_to)

        shared_targets: List[Tuple[Pattern[str], Optional[Pattern[str]], List[Target]]] = []
        for shared in options.targets:
            tests = _compile(shared.tests_pattern)
            excluded = _compile(shared.except_pattern) if shared.except_pattern else None
            hosts = self._prepare_hosts(shared, install, side_table)
            shared_targets.append((tests, excluded, hosts))

        wrappers: List[List[TargetDependency]] = [[] for _ in shared_targets]
        for project in value.projects:
            if project is install:
                continue
            for target in list(project.targets):
                if target.product != Product.UNIT_TESTS:
                    continue
                for index, (tests, excluded, _) in enumerate(shared_targets):
                    if tests.fullmatch(target.name) is None:
                        continue
                    if excluded is not None and excluded.fullmatch(target.name):
                        continue

                    wrapper = generate_framework(target)
                    project.targets.append(wrapper)
                    side_table.insert_flags(
                        TargetFlags.SHARED_TEST_TARGET_GENERATED_FRAMEWORK,
                        project.path,
                        wrapper.name,
                    )
                    wrappers[index].append(TargetDependency.project(wrapper.name, project.path))
                    break

        for (_, _, hosts), dependencies in zip(shared_targets, wrappers):
            for host, (start, end) in zip(hosts, _buckets(len(dependencies), len(hosts))):
                host.dependencies.extend(dependencies[start:end])
                logger.debug("Host %s receives %d wrapper(s)", host.name, end - start)

        logger.info(
            "Generated %d test wrapper(s) for %d shared host group(s)",
            sum(len(d) for d in wrappers),
            len(shared_targets),
        )
        return MapResult(value, side_table)

    def _prepare_hosts(
        self, shared: SharedTestTarget, install: Project, side_table: SideTable
    ) -> List[Target]:
        if shared.use:
            hosts = []
            for name in shared.use:
                target = install.target_named(name)
                if target is None:
                    raise NoTargetError(name, install.name)
                side_table.insert_flags(TargetFlags.SHARED_TEST_TARGET, install.path, name)
                hosts.append(target)
            return hosts

        app_host: Optional[Target] = None
        if shared.need_app_host:
            app_host = generate_app_host(shared)
            side_table.insert_flags(
                TargetFlags.SHARED_TEST_TARGET_APP_HOST, install.path, app_host.name
            )
            install.targets.append(app_host)

        hosts = []
        for i in range(shared.count):
            name = shared.name if i == 0 else f"{shared.name}{i + 1}"
            host = Target(
                name=name,
                product=Product.UNIT_TESTS,
                bundle_id=f"{BUNDLE_ID_PREFIX}.{name}",
            )
            if app_host is not None:
                host.settings = {
                    "TEST_HOST": (
                        f"$(BUILT_PRODUCTS_DIR)/{app_host.product_name}.app/"
                        f"{app_host.product_name}"
                    ),
                    "BUNDLE_LOADER": "$(TEST_HOST)",
                }
                host.dependencies = [TargetDependency.target(app_host.name)]
            install.targets.append(host)
            side_table.insert_flags(TargetFlags.SHARED_TEST_TARGET, install.path, name)
            hosts.append(host)
        return hosts
