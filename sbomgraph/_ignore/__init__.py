"""Ignore-directive scanners: manifest markers to ignore lists."""

from .golang import scan_go_mod
from .gradle import scan_gradle, scan_gradle_text
from .maven import scan_pom
from .models import IGNORE_MARKER, IgnoreDirectives
from .npm import scan_package_json
from .pip import scan_requirements

__all__ = [
    "IGNORE_MARKER",
    "IgnoreDirectives",
    "scan_go_mod",
    "scan_gradle",
    "scan_gradle_text",
    "scan_package_json",
    "scan_pom",
    "scan_requirements",
]
