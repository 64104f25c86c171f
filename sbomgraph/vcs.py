"""Main module version of a Go project, derived from git history.

The version follows Go's pseudo-version scheme:

- no repository, or a repository without commits: ``v0.0.0``
- HEAD carries a tag: the tag itself
- otherwise: ``<next tag version>.<commit time yyyymmddhhmmss>-<12 hex digits>``
  where the next tag version is computed from the latest reachable tag
  (``v0.0.0`` when there is none)
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .coordinate import DEFAULT_MAIN_MODULE_VERSION
from .logging_config import logger
from .tools import ToolRunner

_COMMIT_HASH = re.compile(r"[0-9a-f]{7,64}")
_ABBREVIATED_DIGEST = re.compile(r"g[0-9a-f]{12,}")
_TRAILING_NUMBER = re.compile(r"^(.*?)(\d+)$")


@dataclass(frozen=True)
class TagInfo:
    """Latest tag reachable from HEAD.

    Attributes:
        tag: Tag name, empty when no tag is reachable
        head_is_tagged: HEAD is exactly the tagged commit
        commit_hash: Full hash of HEAD, empty when there are no commits
        commit_timestamp: Commit time of HEAD
    """

    tag: str = ""
    head_is_tagged: bool = False
    commit_hash: str = ""
    commit_timestamp: Optional[datetime] = None


def parse_describe_output(output: str) -> tuple[str, bool]:
    """Split ``git describe`` output into (tag, head_is_tagged).

    ``v1.2.0-3-g0123456789ab`` is three commits past ``v1.2.0``; bare
    ``v1.2.0`` means HEAD is the tagged commit. Tags may contain dashes.
    """
    output = output.strip()
    parts = output.split("-")
    if len(parts) >= 3 and _ABBREVIATED_DIGEST.fullmatch(parts[-1]) and parts[-2].isdigit():
        return "-".join(parts[:-2]), False
    return output, True


def next_tag_version(tag: str) -> str:
    """Version that sorts right after ``tag`` for pseudo-version purposes.

    A trailing number is incremented and ``-0`` appended
    (``v1.2.0`` -> ``v1.2.1-0``); any other tag gets ``-0`` appended
    (``v1.0.0-rc`` -> ``v1.0.0-rc-0``).
    """
    match = _TRAILING_NUMBER.match(tag)
    if match:
        prefix, number = match.groups()
        return f"{prefix}{int(number) + 1}-0"
    return f"{tag}-0"


def pseudo_version(next_version: str, commit_timestamp: datetime, commit_hash: str) -> str:
    if commit_timestamp.tzinfo is not None:
        commit_timestamp = commit_timestamp.astimezone(timezone.utc)
    return f"{next_version}.{commit_timestamp:%Y%m%d%H%M%S}-{commit_hash[:12]}"


class GitRepository:
    """Read-only queries against a git working tree."""

    def __init__(self, directory: Path, runner: ToolRunner, executable: str = "git"):
        self.directory = Path(directory)
        self.runner = runner
        self.executable = executable

    def _git(self, *args: str):
        return self.runner.run([self.executable, *args], "git", cwd=self.directory, check=False)

    def is_repository(self) -> bool:
        result = self._git("rev-parse", "--is-inside-work-tree")
        return result.returncode == 0 and result.stdout.strip() == "true"

    def latest_tag(self) -> TagInfo:
        head = self._git("rev-parse", "HEAD")
        commit_hash = head.stdout.strip() if head.returncode == 0 else ""
        if not _COMMIT_HASH.fullmatch(commit_hash):
            logger.debug(f"No commits found in {self.directory}")
            return TagInfo()

        shown = self._git("show", "HEAD", "--format=%cI", "--quiet")
        timestamp = datetime.fromisoformat(shown.stdout.strip().splitlines()[0])

        described = self._git("describe", "--abbrev=12")
        if described.returncode != 0 and "unannotated tags" in described.stderr:
            described = self._git("describe", "--tags", "--abbrev=12")
        if described.returncode != 0:
            logger.debug(f"No tags reachable from HEAD: {described.stderr.strip()}")
            return TagInfo(commit_hash=commit_hash, commit_timestamp=timestamp)

        tag, head_is_tagged = parse_describe_output(described.stdout)
        return TagInfo(tag, head_is_tagged, commit_hash, timestamp)


def determine_main_module_version(repository: GitRepository) -> str:
    """Compute the version given to the Go main module."""
    if not repository.is_repository():
        return DEFAULT_MAIN_MODULE_VERSION

    info = repository.latest_tag()
    if not info.commit_hash or info.commit_timestamp is None:
        return DEFAULT_MAIN_MODULE_VERSION
    if info.tag and info.head_is_tagged:
        return info.tag

    version = pseudo_version(
        next_tag_version(info.tag or DEFAULT_MAIN_MODULE_VERSION), info.commit_timestamp, info.commit_hash
    )
    logger.debug(f"Main module version derived from git: {version}")
    return version
