"""Hyperlink candidate lines of `git diff` / `git log -p` output."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from diff_links.config import Config
from diff_links.diff_parser import (
    COMMIT_HEADER_PREFIX,
    DEV_NULL,
    DIFF_GIT_PREFIX,
    NEW_FILE_PREFIX,
    parse_diff_git_new_path,
    parse_file_header,
    parse_hunk_header,
)
from diff_links.hyperlinks import format_commit_line, format_file_link, get_workdir


def hyperlink_text(text: str, config: Config) -> str:
    """Hyperlink a whole diff/log text, keeping a trailing newline."""
    if not config.hyperlinks:
        return text
    # Only "\n" ends a line; any other separator stays part of it.
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    rendered = "\n".join(hyperlink_lines(lines, config))
    if text.endswith("\n"):
        rendered += "\n"
    return rendered


def hyperlink_lines(lines: Iterable[str], config: Config) -> Iterator[str]:
    """Yield `lines` with commit hashes, file headers and hunk headers linked.

    File and hunk headers are only linked when the repository work tree is
    known; commit lines only need a commit URL source.
    """
    if not config.hyperlinks:
        yield from lines
        return

    link_files = get_workdir(config) is not None
    current_path: str | None = None
    remaining_old = 0
    remaining_new = 0

    for line in lines:
        if remaining_old > 0 or remaining_new > 0:
            if line.startswith((" ", "-", "+", "\\")) or not line:
                if line.startswith("-"):
                    remaining_old -= 1
                elif line.startswith("+"):
                    remaining_new -= 1
                elif not line.startswith("\\"):
                    remaining_old -= 1
                    remaining_new -= 1
                yield line
                continue
            # Hunk shorter than its header claimed.
            remaining_old = remaining_new = 0

        if line.startswith(COMMIT_HEADER_PREFIX):
            yield format_commit_line(line, config)
            continue

        if line.startswith(DIFF_GIT_PREFIX):
            current_path = parse_diff_git_new_path(line)
            yield line
            continue

        file_header = parse_file_header(line)
        if file_header is not None:
            if file_header.marker == NEW_FILE_PREFIX:
                current_path = None if file_header.path == DEV_NULL else file_header.path
            if not link_files or file_header.raw_path == DEV_NULL:
                yield line
                continue
            yield (
                file_header.marker
                + format_file_link(file_header.path, None, file_header.raw_path, config)
                + file_header.trailer
            )
            continue

        hunk_header = parse_hunk_header(line)
        if hunk_header is not None:
            remaining_old = hunk_header.old_count
            remaining_new = hunk_header.new_count
            if not link_files or current_path is None:
                yield line
                continue
            yield (
                format_file_link(
                    current_path, hunk_header.new_start, hunk_header.range_text, config
                )
                + hunk_header.section
            )
            continue

        yield line

