"""Python environment extraction from pip and pipdeptree output."""

import json
import re
from dataclasses import dataclass, field
from typing import Optional

from ..coordinate import PackageCoordinate, canonical_python_name, pypi_coordinate
from ..exceptions import MalformedInputError, PackageNotInstalledError
from .models import DependencyTree, ExtractionContext

DEFAULT_PIP_ROOT = pypi_coordinate("default-pip-root", "0.0.0")

_REQUIREMENT_NAME = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass
class InstalledPackage:
    name: str
    version: str
    requires: list[str] = field(default_factory=list)


@dataclass
class Requirement:
    """One line of a requirements file.

    Attributes:
        name: Distribution name as written
        pinned_version: Version after ``==``, if pinned exactly
        line: Original line, without its trailing newline
    """

    name: str
    pinned_version: Optional[str] = None
    line: str = ""


def parse_requirement_line(line: str) -> Optional[Requirement]:
    """Parse a single requirement line.

    Handles formats like:
    - requests
    - requests==2.31.0
    - requests>=2.0,<3
    - requests[security]>=2.0 ; python_version >= "3.8"
    """
    original = line.rstrip("\n")
    line = line.split("#", 1)[0].split(";", 1)[0].strip()
    if not line or line.startswith("-"):
        return None

    match = _REQUIREMENT_NAME.match(line)
    if match is None:
        return None
    name = match.group(1)
    rest = line[match.end() :].strip()
    if rest.startswith("["):
        rest = rest[rest.find("]") + 1 :].strip()

    pinned = None
    if rest.startswith("==") and "," not in rest:
        pinned = rest[2:].strip()
    return Requirement(name, pinned, original)


def parse_requirements(text: str) -> list[Requirement]:
    requirements = []
    for line in text.splitlines():
        requirement = parse_requirement_line(line)
        if requirement is not None:
            requirements.append(requirement)
    return requirements


def parse_pipdeptree_json(output: str) -> dict[str, InstalledPackage]:
    """Parse ``pipdeptree --json`` into canonical name -> package."""
    try:
        entries = json.loads(output)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"pipdeptree produced output that is not valid JSON: {e}") from e

    installed = {}
    for entry in entries:
        package = entry.get("package") or {}
        name = package.get("package_name") or package.get("key")
        version = package.get("installed_version")
        if not name or not version:
            raise MalformedInputError(f"pipdeptree entry is missing a name or version: {package}")
        requires = [d.get("package_name") or d.get("key") for d in entry.get("dependencies") or []]
        installed[canonical_python_name(name)] = InstalledPackage(name, version, [r for r in requires if r])
    return installed


def parse_pip_show(output: str) -> dict[str, InstalledPackage]:
    """Parse ``pip show`` output for several packages (blocks split by ``---``)."""
    installed = {}
    for block in re.split(r"^---\s*$", output, flags=re.MULTILINE):
        fields = {}
        for line in block.splitlines():
            key, sep, value = line.partition(":")
            if sep and not line.startswith(" "):
                fields[key.strip()] = value.strip()
        name, version = fields.get("Name"), fields.get("Version")
        if not name:
            continue
        if not version:
            raise MalformedInputError(f"pip show reported no version for {name}")
        requires = [r.strip() for r in fields.get("Requires", "").split(",") if r.strip()]
        installed[canonical_python_name(name)] = InstalledPackage(name, version, requires)
    return installed


def parse_pip_freeze(output: str) -> list[str]:
    """Distribution names listed by ``pip freeze --all``."""
    names = []
    for line in output.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("-e"):
            continue
        match = _REQUIREMENT_NAME.match(line)
        if match:
            names.append(match.group(1))
    return names


def find_installed(installed: dict[str, InstalledPackage], name: str) -> InstalledPackage:
    package = installed.get(canonical_python_name(name))
    if package is None:
        raise PackageNotInstalledError(
            f"Package name={name} is not installed in your python environment, "
            "either install it (better to install requirements.txt altogether) or remove it from requirements.txt"
        )
    return package


def build_pip_tree(installed: dict[str, InstalledPackage], context: ExtractionContext) -> DependencyTree:
    root = context.root or DEFAULT_PIP_ROOT
    tree = DependencyTree(root)
    expanded: set[PackageCoordinate] = set()
    pending: list[tuple[PackageCoordinate, InstalledPackage]] = []

    for name in context.direct_dependencies:
        package = find_installed(installed, name)
        coordinate = pypi_coordinate(package.name, package.version)
        tree.add(root, coordinate)
        pending.append((coordinate, package))

    if context.direct_only:
        return tree

    pending.reverse()
    while pending:
        coordinate, package = pending.pop()
        if coordinate in expanded:
            continue
        expanded.add(coordinate)
        for requirement in package.requires:
            child = installed.get(canonical_python_name(requirement))
            # extras that are not installed
            if child is None:
                continue
            child_coordinate = pypi_coordinate(child.name, child.version)
            tree.add(coordinate, child_coordinate)
            pending.append((child_coordinate, child))
    return tree


def extract_pipdeptree(output: str, context: ExtractionContext) -> DependencyTree:
    return build_pip_tree(parse_pipdeptree_json(output), context)


def extract_pip_show(output: str, context: ExtractionContext) -> DependencyTree:
    return build_pip_tree(parse_pip_show(output), context)
