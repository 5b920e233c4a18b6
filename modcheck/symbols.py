"""Markers embedded in report text.

Issue counting looks for ``WARNING`` and ``ERROR`` as substrings of a rendered
fragment, so every checker and renderer must emit them through these constants.
"""

OK = "✅ "
WARNING = "⚠️ "
ERROR = "❌ "
INFO = "ℹ️ "
TIMEOUT = "⏱️ "
HINT = "💡 "

ISSUE_MARKERS = (WARNING.strip(), ERROR.strip())


def contains_issue(text: str) -> bool:
    """Return True when ``text`` carries a warning or error marker."""
    return any(marker in text for marker in ISSUE_MARKERS)
