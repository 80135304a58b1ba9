"""Unified diff header parsing primitives."""

from __future__ import annotations

from dataclasses import dataclass
from re import Match, compile

HUNK_HEADER_RE = compile(
    r"^(?P<range>@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@)(?P<section>.*)$"
)
COMMIT_HEADER_PREFIX = "commit "
DIFF_GIT_PREFIX = "diff --git "
OLD_FILE_PREFIX = "--- "
NEW_FILE_PREFIX = "+++ "
DEV_NULL = "/dev/null"


@dataclass(slots=True)
class HunkHeader:
    """Parsed hunk header values."""

    range_text: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str


@dataclass(slots=True)
class FileHeader:
    """A `---`/`+++` header line split around its path token."""

    marker: str
    raw_path: str
    path: str
    trailer: str


def parse_hunk_header(header: str) -> HunkHeader | None:
    """Parse an `@@ -a,b +c,d @@ section` line; None if it is not one."""
    match: Match[str] | None = HUNK_HEADER_RE.match(header)
    if match is None:
        return None

    old_count = int(match.group("old_count")) if match.group("old_count") else 1
    new_count = int(match.group("new_count")) if match.group("new_count") else 1

    return HunkHeader(
        range_text=match.group("range"),
        old_start=int(match.group("old_start")),
        old_count=old_count,
        new_start=int(match.group("new_start")),
        new_count=new_count,
        section=match.group("section"),
    )


def parse_file_header(line: str) -> FileHeader | None:
    """Parse a `--- a/path` or `+++ b/path` line; None if it is not one."""
    if line.startswith(OLD_FILE_PREFIX):
        marker = OLD_FILE_PREFIX
    elif line.startswith(NEW_FILE_PREFIX):
        marker = NEW_FILE_PREFIX
    else:
        return None

    raw_path, tab, rest = line[len(marker) :].partition("\t")
    trailer = tab + rest
    if not tab and raw_path.endswith("\r"):
        raw_path, trailer = raw_path[:-1], "\r"
    if not raw_path:
        return None
    return FileHeader(
        marker=marker,
        raw_path=raw_path,
        path=strip_ab_prefix(raw_path),
        trailer=trailer,
    )


def parse_diff_git_new_path(line: str) -> str | None:
    """Return the new-side path of a `diff --git a/x b/y` line.

    Paths may contain spaces, so the new side is found from the right.
    """
    paths = line[len(DIFF_GIT_PREFIX) :].rstrip("\r")
    split_at = paths.rfind(" b/")
    if split_at != -1:
        return paths[split_at + len(" b/") :]
    parts = paths.split(maxsplit=1)
    if len(parts) < 2:
        return None
    return strip_ab_prefix(parts[1])


def strip_ab_prefix(path: str) -> str:
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path
