"""Ignore directives in ``go.mod`` files.

Only require entries are considered, either in a ``require (...)`` block
or on a single ``require`` line, with the marker in a trailing comment::

    require (
        github.com/google/uuid v1.1.2 // exhortignore
        golang.org/x/sys v0.6.0 // indirect //exhortignore
    )
"""

import re
from typing import Mapping, Optional

from ..coordinate import PackageCoordinate, golang_coordinate
from .models import IGNORE_MARKER, IgnoreDirectives

_MARKER_COMMENT = re.compile(rf"//.*\b{IGNORE_MARKER}\b")
_REQUIREMENT = re.compile(r"^([^\s]+)\s+([vV][0-9][^\s]*)")

# Directive lines that never declare a requirement
_STRUCTURAL_PREFIXES = ("module ", "go ", "toolchain ", "require (", "require(", "exclude ", "replace ", "retract ", "use ")


def parse_require_line(line: str) -> Optional[tuple[str, str]]:
    """(module path, version) of a require entry, or None."""
    stripped = line.strip()
    if not stripped or stripped.startswith("//") or "=>" in stripped:
        return None
    if stripped.startswith(_STRUCTURAL_PREFIXES) or stripped in (")", "("):
        return None
    if stripped.startswith("require "):
        stripped = stripped[len("require ") :].strip()
    match = _REQUIREMENT.match(stripped.split("//", 1)[0].strip())
    if match is None:
        return None
    return match.group(1), match.group(2)


def parse_requirements(text: str) -> dict[str, str]:
    """All require entries of a go.mod, module path -> version."""
    requirements = {}
    in_block = False
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith(("require (", "require(")):
            in_block = True
            continue
        if in_block and stripped.startswith(")"):
            in_block = False
            continue
        if in_block or stripped.startswith("require "):
            entry = parse_require_line(line)
            if entry is not None:
                requirements[entry[0]] = entry[1]
    return requirements


def scan_go_mod(text: str, qualifiers: Optional[Mapping[str, str]] = None) -> IgnoreDirectives:
    """Coordinates of require entries carrying the ignore marker.

    ``qualifiers`` must match those given to graph nodes so that the
    coordinates compare equal.
    """
    directives = IgnoreDirectives()
    for line in text.splitlines():
        if not _MARKER_COMMENT.search(line):
            continue
        entry = parse_require_line(line)
        if entry is None:
            continue
        path, version = entry
        coordinate: PackageCoordinate = golang_coordinate(f"{path}@{version}", qualifiers=qualifiers)
        directives.coordinates.append(coordinate)
    return directives
