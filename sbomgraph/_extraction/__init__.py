"""Tree extractors: raw tool output to (root, edges).

Every supported tool format is one member of :class:`ExtractorKind` and is
dispatched through :func:`extract`.

Example:
    tree = extract(ExtractorKind.NPM_JSON, npm_ls_output, ExtractionContext())
    graph = tree.to_graph()
"""

from enum import Enum
from typing import Callable

from .go_graph import extract_go_graph
from .models import DependencyTree, Edge, ExtractionContext
from .npm_json import extract_npm_tree, extract_pnpm_tree
from .pip_tree import extract_pip_show, extract_pipdeptree
from .text_tree import extract_gradle_tree, extract_maven_tree
from .yarn import extract_yarn_berry_tree, extract_yarn_classic_tree


class ExtractorKind(str, Enum):
    MAVEN_TEXT = "maven-text"
    GRADLE_TEXT = "gradle-text"
    GO_GRAPH = "go-graph"
    NPM_JSON = "npm-json"
    PNPM_JSON = "pnpm-json"
    YARN_CLASSIC_JSON = "yarn-classic-json"
    YARN_BERRY_JSON = "yarn-berry-json"
    PIPDEPTREE_JSON = "pipdeptree-json"
    PIP_SHOW = "pip-show"


_EXTRACTORS: dict[ExtractorKind, Callable[[str, ExtractionContext], DependencyTree]] = {
    ExtractorKind.MAVEN_TEXT: extract_maven_tree,
    ExtractorKind.GRADLE_TEXT: extract_gradle_tree,
    ExtractorKind.GO_GRAPH: extract_go_graph,
    ExtractorKind.NPM_JSON: extract_npm_tree,
    ExtractorKind.PNPM_JSON: extract_pnpm_tree,
    ExtractorKind.YARN_CLASSIC_JSON: extract_yarn_classic_tree,
    ExtractorKind.YARN_BERRY_JSON: extract_yarn_berry_tree,
    ExtractorKind.PIPDEPTREE_JSON: extract_pipdeptree,
    ExtractorKind.PIP_SHOW: extract_pip_show,
}


def extract(kind: ExtractorKind, output: str, context: ExtractionContext | None = None) -> DependencyTree:
    """Parse raw tool output of the given kind.

    Raises:
        MalformedInputError: If the output does not match the expected format
    """
    return _EXTRACTORS[kind](output, context or ExtractionContext())


__all__ = [
    "DependencyTree",
    "Edge",
    "ExtractionContext",
    "ExtractorKind",
    "extract",
]
