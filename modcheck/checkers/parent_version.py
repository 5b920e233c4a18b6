"""The declared parent reference should use the latest stable version."""

from __future__ import annotations

from .. import symbols
from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .base import Checker, add_undetermined_versions

logger = get_logger("checkers.parent_version")


class ParentVersionChecker(Checker):
    id = "parentVersion"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        fragment = Fragment()
        parent = module.parent_ref

        if parent is None:
            if context.is_root:
                return fragment
            logger.error("No parent declared for module %s", module.name)
            fragment.heading("Missing parent reference").open_section()
            fragment.error(f"No parent is declared for module `{module.name}`.")
            fragment.info("If this module should inherit from a parent descriptor, check its <parent> element.")
            return fragment.close_section()

        if not parent.version or "${" in parent.version or context.versions is None:
            return fragment

        lookup = context.versions.lookup(parent.coordinate, parent.version)
        if not lookup.ok:
            logger.debug("Latest version of parent %s unknown: %s", parent.coordinate, lookup.detail)
            return add_undetermined_versions(fragment, [lookup])
        if not lookup.is_outdated:
            return fragment

        fragment.heading("Outdated parent version").open_section()
        fragment.warning("The descriptor does not use the latest available parent version.")
        fragment.table(
            ["Group ID", "Artifact ID", "Current version", "Latest stable version"],
            [[parent.coordinate.group_id, parent.coordinate.artifact_id, parent.version, lookup.latest_stable]],
        )
        fragment.paragraph(f"{symbols.HINT}Update the parent version to pick up the latest improvements.")
        return fragment.close_section()
