"""Ignore directives in ``package.json`` (npm, pnpm and yarn)."""

from typing import Any, Mapping

from ..exceptions import MalformedInputError
from .models import IGNORE_MARKER, IgnoreDirectives


def scan_package_json(manifest: Mapping[str, Any]) -> IgnoreDirectives:
    """Names listed in the manifest's top-level marker array."""
    names = manifest.get(IGNORE_MARKER) or []
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise MalformedInputError(f"'{IGNORE_MARKER}' in package.json must be an array of package names")
    return IgnoreDirectives(names=list(names))
