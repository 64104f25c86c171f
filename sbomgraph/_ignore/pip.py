"""Ignore directives in ``requirements.txt``.

    requests==2.31.0  # exhortignore
"""

import re

from .._extraction.pip_tree import parse_requirement_line
from ..coordinate import canonical_python_name
from .models import IGNORE_MARKER, IgnoreDirectives

_MARKER_COMMENT = re.compile(rf"#.*\b{IGNORE_MARKER}\b")


def scan_requirements(text: str) -> IgnoreDirectives:
    """Names of requirements whose line carries the marker comment."""
    directives = IgnoreDirectives()
    for line in text.splitlines():
        if not _MARKER_COMMENT.search(line):
            continue
        requirement = parse_requirement_line(line)
        if requirement is not None:
            directives.names.append(canonical_python_name(requirement.name))
    return directives
