"""Literal dependency versions with a newer stable release available."""

from __future__ import annotations

import re
from typing import List

from .. import symbols
from ..context import AnalysisContext
from ..logging import get_logger
from ..models import Dependency
from ..report import Fragment
from ..versions import VersionLookup
from .base import Checker, add_undetermined_versions

logger = get_logger("checkers.outdated_dependencies")


class OutdatedDependenciesChecker(Checker):
    id = "outdatedDependencies"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        fragment = Fragment()
        if context.versions is None:
            return fragment

        candidates = [dep for dep in context.module.dependencies if _should_check(dep, context)]
        if not candidates:
            logger.debug("No dependency to check in %s", context.module.name)
            return fragment

        lookups = context.versions.lookup_many((dep.coordinate, dep.version) for dep in candidates)
        ordered: List[VersionLookup] = sorted(
            lookups.values(), key=lambda item: (item.coordinate.group_id, item.coordinate.artifact_id)
        )
        outdated = [lookup for lookup in ordered if lookup.is_outdated]
        undetermined = [lookup for lookup in ordered if not lookup.ok]
        up_to_date = [lookup for lookup in ordered if lookup.ok and not lookup.is_outdated]
        show_all = context.settings.show_all_versions
        if not outdated and not undetermined and not (show_all and up_to_date):
            return fragment

        fragment.heading("Dependency versions").open_section()
        if outdated:
            fragment.warning(f"{len(outdated)} outdated dependenc{'y' if len(outdated) == 1 else 'ies'} found:")
            fragment.table(
                ["Group ID", "Artifact ID", "Current version", "Latest stable"],
                [
                    [item.coordinate.group_id, item.coordinate.artifact_id, item.current, item.latest_stable]
                    for item in outdated
                ],
            )
            fragment.paragraph(f"{symbols.HINT}Check compatibility before upgrading dependencies.")
        add_undetermined_versions(fragment, undetermined)
        if show_all and up_to_date:
            fragment.info(f"{len(up_to_date)} dependenc{'y is' if len(up_to_date) == 1 else 'ies are'} up to date:")
            fragment.table(
                ["Group ID", "Artifact ID", "Current version"],
                [[item.coordinate.group_id, item.coordinate.artifact_id, item.current] for item in up_to_date],
            )
        return fragment.close_section()


def _should_check(dep: Dependency, context: AnalysisContext) -> bool:
    version = (dep.version or "").strip()
    if not version or version.startswith("${"):
        return False
    if dep.scope and dep.scope in context.settings.ignore_scopes:
        return False
    pattern = context.settings.ignore_groups
    if pattern and re.fullmatch(pattern, dep.group_id):
        return False
    return True
