"""Maven and Gradle indented dependency trees.

Both tools print one dependency per line, indented with marker glyphs::

    com.acme:app:jar:1.0.0
    +- org.slf4j:slf4j-api:jar:2.0.9:compile
    \\- com.google.guava:guava:jar:32.1.2-jre:compile
       \\- com.google.guava:failureaccess:jar:1.0.1:compile

Gradle output is first rewritten into the Maven shape and then parsed by
the same stack-based reader.
"""

import re
from typing import Iterable, Optional

from ..coordinate import PackageCoordinate, maven_coordinate
from ..exceptions import MalformedInputError
from ..graph import NodeScope
from .models import DependencyTree, Edge, ExtractionContext

_CONFLICT = re.compile(r"omitted for conflict with ([^\s)]+)")
_REPEAT_MARKERS = re.compile(r"\s*\((\*|n|c)\)")
_VERSION_TOKEN = re.compile(r"^[0-9]+(\.[0-9A-Za-z]+)*")
_PROPERTY = re.compile(r"^([^:\s][^:]*):\s+(.+)$")
_ROOT_PROJECT = re.compile(r"Root project '([^']+)'")

# Maven scopes that end up on the compile classpath of the consumer
_COMPILE_SCOPES = {"compile", "runtime", "provided", "system"}

GRADLE_CONFIGURATIONS = (
    ("runtimeClasspath", NodeScope.REQUIRED),
    ("compileClasspath", NodeScope.OPTIONAL),
)


def line_depth(line: str) -> int:
    """Depth of a tree line: 0 for the root, 1 for its children and so on."""
    if re.match(r"^\w", line):
        return 0
    index = line.find("-")
    if index < 0:
        return -1
    return (index - 1) // 3 + 1


def parse_tree_line(line: str) -> Optional[tuple[PackageCoordinate, Optional[str]]]:
    """Parse one Maven tree line into (coordinate, scope).

    Returns None for lines that do not carry a versioned coordinate.
    """
    text = line.strip() if line_depth(line) == 0 else line[line.find("-") + 1 :].strip()
    if text.startswith("("):
        text = text[1:]
    token, _, remark = text.partition(" ")
    parts = token.rstrip(")").split(":")

    scope = None
    if len(parts) == 4:
        group_id, artifact_id, _, version = parts
    elif len(parts) == 5:
        group_id, artifact_id, _, version, scope = parts
    elif len(parts) == 6:
        group_id, artifact_id, _, classifier, version, scope = parts
        version = f"{version}-{classifier}"
    else:
        return None

    conflict = _CONFLICT.search(remark)
    if conflict:
        version = conflict.group(1)
    if not group_id or not artifact_id or not _VERSION_TOKEN.match(version):
        return None
    if scope in _COMPILE_SCOPES:
        scope = "compile"
    return maven_coordinate(group_id, artifact_id, version), scope


def parse_indented_tree(
    lines: Iterable[str],
    root: PackageCoordinate,
    scope: Optional[NodeScope] = None,
    max_depth: Optional[int] = None,
) -> list[Edge]:
    """Turn indented child lines into parent -> child edges.

    A stack holds the current ancestor at every depth. Before a line at
    depth ``d`` is attached, the stack is cut back to ``d`` entries so its
    top is the nearest line at depth ``d - 1``. Test-scoped and unparsable
    lines are skipped together with everything beneath them.
    """
    edges: list[Edge] = []
    stack: list[PackageCoordinate] = [root]
    skip_below: Optional[int] = None

    for line in lines:
        if not line.strip():
            continue
        depth = line_depth(line)
        if depth <= 0:
            continue
        if skip_below is not None:
            if depth > skip_below:
                continue
            skip_below = None

        parsed = parse_tree_line(line)
        if parsed is None:
            skip_below = depth
            continue
        coordinate, dependency_scope = parsed
        if dependency_scope == "test":
            skip_below = depth
            continue

        del stack[depth:]
        if max_depth is None or depth <= max_depth:
            edges.append(Edge(stack[-1], coordinate, scope))
        stack.append(coordinate)

    return edges


def extract_maven_tree(output: str, context: ExtractionContext) -> DependencyTree:
    """Read ``mvn dependency:tree -DoutputType=text`` output."""
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        raise MalformedInputError("Maven dependency tree is empty")

    parsed_root = parse_tree_line(lines[0]) if line_depth(lines[0]) == 0 else None
    if parsed_root is None:
        raise MalformedInputError(f"Maven dependency tree does not start with the project: {lines[0]!r}")
    root = context.root or parsed_root[0]

    tree = DependencyTree(root)
    tree.edges.extend(parse_indented_tree(lines[1:], root, max_depth=1 if context.direct_only else None))
    return tree


# -- Gradle -----------------------------------------------------------------


def parse_gradle_properties(output: str) -> dict[str, str]:
    """Parse ``gradle properties`` output into a name -> value mapping."""
    properties = {}
    for line in output.splitlines():
        match = _PROPERTY.match(line)
        if match:
            properties[match.group(1).strip()] = match.group(2).strip()
    return properties


def gradle_root(properties_output: str, dependencies_output: str) -> PackageCoordinate:
    """Coordinate of the Gradle root project."""
    properties = parse_gradle_properties(properties_output)
    match = _ROOT_PROJECT.search(dependencies_output)
    name = match.group(1) if match else properties.get("name")
    if not name:
        raise MalformedInputError("Unable to determine the Gradle root project name")
    return maven_coordinate(properties.get("group") or None, name, properties.get("version"))


def gradle_configuration_lines(output: str, configuration: str) -> list[str]:
    """Lines of one configuration block, up to the next blank line."""
    collected: list[str] = []
    inside = False
    for line in output.splitlines():
        if not inside:
            if line.startswith(f"{configuration} ") or line.strip() == configuration:
                inside = True
            continue
        if not line.strip():
            break
        collected.append(line)
    return collected


def _maven_glyphs(line: str) -> str:
    return line.replace("---", "-").replace("    ", "  ")

def normalize_gradle_line(line: str) -> Optional[str]:
    """Rewrite a Gradle tree line into Maven tree syntax.

    ``|    +--- g:a:1.0 -> 1.2 (*)`` becomes ``|  +- g:a:jar:1.2:compile``.
    Returns None for lines that carry no versioned module.
    """
    if not line.strip() or line.rstrip().endswith(" FAILED"):
        return None
    line = _maven_glyphs(line)
    marker = line.find("- ")
    if marker < 0:
        return None
    prefix, body = line[: marker + 2], _REPEAT_MARKERS.sub("", line[marker + 2 :]).strip()

    declared, arrow, resolved = body.partition(" -> ")
    parts = declared.split()[0].split(":") if declared.split() else []
    if arrow:
        if len(parts) < 2 or not resolved.split():
            return None
        parts = parts[:2] + [resolved.split()[0]]
    if len(parts) != 3 or not _VERSION_TOKEN.match(parts[2]) or "libs." in body:
        return None

    group_id, artifact_id, version = parts
    return f"{prefix}{group_id}:{artifact_id}:jar:{version}:compile"


def extract_gradle_tree(output: str, context: ExtractionContext) -> DependencyTree:
    """Read ``gradle dependencies`` output.

    The runtime classpath yields required nodes and the compile classpath
    optional ones; a node keeps the scope of the first edge that created it.
    """
    if context.root is None:
        raise MalformedInputError("Gradle extraction requires the root project coordinate")

    tree = DependencyTree(context.root)
    for configuration, scope in GRADLE_CONFIGURATIONS:
        normalized = []
        skip_below = None
        for line in gradle_configuration_lines(output, configuration):
            depth = line_depth(_maven_glyphs(line))
            if depth <= 0:
                continue
            if skip_below is not None and depth > skip_below:
                continue
            skip_below = None
            rewritten = normalize_gradle_line(line)
            if rewritten is None:
                # project dependencies and failed modules hide their subtree
                skip_below = depth
                continue
            normalized.append(rewritten)
        tree.edges.extend(
            parse_indented_tree(normalized, context.root, scope, max_depth=1 if context.direct_only else None)
        )
    return tree
