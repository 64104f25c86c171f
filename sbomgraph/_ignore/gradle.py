"""Ignore directives in Gradle build scripts.

A dependency declaration is ignored when its line ends with a comment
holding the marker. Three declaration styles are understood::

    implementation "log4j:log4j:1.2.17" // exhortignore
    implementation(group: "log4j", name: "log4j", version: "1.2.17") // exhortignore
    implementation libs.log4j // exhortignore

Catalog aliases are looked up in ``gradle/libs.versions.toml``; an alias
the catalog does not define is dropped.
"""

import re
import tomllib
from pathlib import Path
from typing import Any, Mapping, Optional

from ..coordinate import PackageCoordinate, maven_coordinate
from ..exceptions import MalformedInputError
from ..logging_config import logger
from .models import IGNORE_MARKER, IgnoreDirectives

VERSION_CATALOG = Path("gradle") / "libs.versions.toml"

_COMMENT = re.compile(r"//|/\*")
_STRING_NOTATION = re.compile(r"""["']([^"':\s]+):([^"':\s]+):([^"':\s]+)(?::[^"'\s]+)?["']""")
_CATALOG_ALIAS = re.compile(r"\blibs\.([A-Za-z0-9_.]+)")


def _named_argument(code: str, name: str) -> Optional[str]:
    match = re.search(rf"\b{name}\s*[:=]\s*[\"']([^\"']+)[\"']", code)
    return match.group(1) if match else None


def _alias_key(alias: str) -> str:
    return re.sub(r"[-_.]", ".", alias)


def _catalog_version(version: Any, versions: Mapping[str, Any]) -> Optional[str]:
    if isinstance(version, str):
        return version
    if isinstance(version, dict):
        if "ref" in version:
            return _catalog_version(versions.get(version["ref"]), versions)
        for key in ("strictly", "require", "prefer"):
            if key in version:
                return str(version[key])
    return None


def resolve_catalog_alias(alias: str, catalog: Mapping[str, Any]) -> Optional[PackageCoordinate]:
    """Resolve ``libs.<alias>`` against a parsed version catalog."""
    libraries = catalog.get("libraries") or {}
    versions = catalog.get("versions") or {}
    wanted = _alias_key(alias)
    entry = next((value for key, value in libraries.items() if _alias_key(key) == wanted), None)
    if entry is None:
        return None

    if isinstance(entry, str):
        parts = entry.split(":")
        if len(parts) < 2:
            return None
        return maven_coordinate(parts[0], parts[1], parts[2] if len(parts) > 2 else None)

    if "module" in entry:
        group_id, _, artifact_id = str(entry["module"]).partition(":")
    else:
        group_id, artifact_id = entry.get("group"), entry.get("name")
    if not group_id or not artifact_id:
        return None
    return maven_coordinate(group_id, artifact_id, _catalog_version(entry.get("version"), versions))


def _declared_coordinate(code: str, catalog: Mapping[str, Any]) -> Optional[PackageCoordinate]:
    group_id, artifact_id = _named_argument(code, "group"), _named_argument(code, "name")
    if group_id and artifact_id:
        return maven_coordinate(group_id, artifact_id, _named_argument(code, "version"))

    match = _STRING_NOTATION.search(code)
    if match:
        return maven_coordinate(*match.groups())

    alias = _CATALOG_ALIAS.search(code)
    if alias:
        coordinate = resolve_catalog_alias(alias.group(1), catalog)
        if coordinate is None:
            logger.debug(f"Version catalog has no library for alias libs.{alias.group(1)}, ignoring directive")
        return coordinate
    return None


def scan_gradle_text(text: str, catalog: Optional[Mapping[str, Any]] = None) -> IgnoreDirectives:
    directives = IgnoreDirectives()
    for line in text.splitlines():
        if IGNORE_MARKER not in line:
            continue
        code = _COMMENT.split(line, 1)[0]
        coordinate = _declared_coordinate(code, catalog or {})
        if coordinate is not None:
            directives.coordinates.append(coordinate)
    return directives


def load_version_catalog(project_dir: Path) -> dict:
    path = Path(project_dir) / VERSION_CATALOG
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise MalformedInputError(f"Unable to parse {path}: {e}") from e


def scan_gradle(build_file: Path) -> IgnoreDirectives:
    build_file = Path(build_file)
    directives = scan_gradle_text(build_file.read_text(encoding="utf-8"), load_version_catalog(build_file.parent))
    logger.debug(f"Found {len(directives)} ignored Gradle dependencies in {build_file.name}")
    return directives
