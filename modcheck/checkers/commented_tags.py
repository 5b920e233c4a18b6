"""Commented-out descriptor blocks that still contain significant tags."""

from __future__ import annotations

import re
from typing import List

from ..context import AnalysisContext
from ..logging import get_logger
from ..report import Fragment
from .base import Checker

SIGNIFICANT_TAGS = (
    "modelVersion", "parent", "groupId", "artifactId", "version", "packaging", "name", "description", "url",
    "inceptionYear", "licenses", "license", "organization", "developers", "developer", "scm", "issueManagement",
    "ciManagement", "distributionManagement", "repositories", "repository", "pluginRepositories",
    "pluginRepository", "modules", "dependencies", "dependency", "dependencyManagement", "build", "plugins",
    "plugin", "pluginManagement", "executions", "execution", "goals", "resources", "resource", "testResources",
    "testResource", "reporting", "reports", "report", "profiles", "profile", "properties",
)

_COMMENT = re.compile(r"<!--(.*?)-->", re.DOTALL)
_SIGNIFICANT = re.compile(r"<\s*(?:" + "|".join(SIGNIFICANT_TAGS) + r")(?![\w.-])[^>]*>")

logger = get_logger("checkers.commented_tags")


def extract_commented_blocks(content: str) -> List[str]:
    blocks: List[str] = []
    for match in _COMMENT.finditer(content):
        comment = match.group(1).strip()
        if _SIGNIFICANT.search(comment):
            blocks.append(comment)
    return blocks


class CommentedTagsChecker(Checker):
    id = "commentedTags"

    def generate_report(self, context: AnalysisContext) -> Fragment:
        module = context.module
        fragment = Fragment()
        descriptor = module.descriptor
        if descriptor is None or not descriptor.exists():
            message = f"Cannot find the descriptor of {module.name}"
            logger.warning(message)
            return fragment.error(message)

        blocks = extract_commented_blocks(descriptor.read_text(encoding="utf-8"))
        if not blocks:
            return fragment

        fragment.heading(f"Commented-out XML tags in `{descriptor.name}`").open_section()
        fragment.warning("The blocks below are disabled by comments, which can cause unexpected behaviour.")
        fragment.table(["Commented XML block"], [[block] for block in blocks])
        return fragment.close_section()
