"""Ignore directives in Maven ``pom.xml`` files.

A dependency is ignored when an XML comment holding the marker sits
directly inside its ``<dependency>`` element::

    <dependency>
        <!--exhortignore-->
        <groupId>log4j</groupId>
        <artifactId>log4j</artifactId>
        <version>1.2.17</version>
    </dependency>
"""

import xml.etree.ElementTree as ET
from typing import Optional

from ..coordinate import maven_coordinate
from ..exceptions import MalformedInputError
from ..logging_config import logger
from .models import IGNORE_MARKER, IgnoreDirectives


def local_name(tag) -> str:
    """Tag name without its XML namespace; empty for comments."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element:
        if local_name(child.tag) == name:
            return (child.text or "").strip() or None
    return None


def parse_pom(text: str) -> ET.Element:
    """Parse a POM keeping comments in the tree."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        return ET.fromstring(text, parser=parser)
    except ET.ParseError as e:
        raise MalformedInputError(f"Unable to parse pom.xml: {e}") from e


def is_marked_ignored(dependency: ET.Element) -> bool:
    return any(child.tag is ET.Comment and (child.text or "").strip() == IGNORE_MARKER for child in dependency)


def scan_pom(text: str) -> IgnoreDirectives:
    directives = IgnoreDirectives()
    for element in parse_pom(text).iter():
        if local_name(element.tag) != "dependency" or not is_marked_ignored(element):
            continue
        group_id = child_text(element, "groupId")
        artifact_id = child_text(element, "artifactId")
        if not group_id or not artifact_id:
            raise MalformedInputError("Ignored Maven dependency is missing groupId or artifactId")
        directives.coordinates.append(
            maven_coordinate(group_id, artifact_id, child_text(element, "version"), child_text(element, "scope"))
        )

    logger.debug(f"Found {len(directives)} ignored Maven dependencies")
    return directives
