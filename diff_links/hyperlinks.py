"""Commit and file hyperlinks for rendered diff output.

Both formatters return their input unchanged (the same string object) when
no link can be built: a missing hyperlink never stops a diff from rendering.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from re import Match, Pattern, compile

import structlog

from diff_links.config import WORKDIR_ENTRY_KEY, Config, GitConfig, PathEntry
from diff_links.git import GitError
from diff_links.osc8 import format_osc8_hyperlink
from diff_links.remote import GitHubRepo, GitRemoteRepo, parse_remote_url

COMMIT_LINE_PATTERN = "(.* )([0-9a-f]{40})(.*)"
ORIGIN_REMOTE = "origin"

logger = structlog.get_logger(__name__)

_commit_line_re: Pattern[str] | None = None
_commit_line_re_lock = threading.Lock()


def commit_line_pattern() -> Pattern[str]:
    """Return the shared commit-line pattern, compiling it on first use."""
    global _commit_line_re
    if _commit_line_re is None:
        with _commit_line_re_lock:
            if _commit_line_re is None:
                _commit_line_re = compile(COMMIT_LINE_PATTERN)
    return _commit_line_re


def format_commit_line(line: str, config: Config) -> str:
    """Link the 40-hex commit hash in `line`.

    The leading group is greedy, so with several hashes on one line only the
    last one preceded by a space is linked.
    """
    commit_link_format = config.hyperlinks_commit_link_format
    if commit_link_format:
        return _replace_commit(line, lambda commit: commit_link_format.replace("{commit}", commit))

    github_repo = resolve_github_repo(config.git_config)
    if github_repo is not None:
        return _replace_commit(line, lambda commit: format_github_commit_url(commit, github_repo))

    return line


def format_github_commit_url(commit: str, github_repo: str) -> str:
    return GitHubRepo(github_repo).commit_url(commit)


def format_file_link(
    relative_path: str,
    line_number: int | None,
    display_text: str,
    config: Config,
) -> str:
    """Link `display_text` to `relative_path` inside the repository work tree.

    Without a known work tree the bare `relative_path` is returned.
    """
    workdir = get_workdir(config)
    if workdir is None:
        return relative_path

    absolute_path = workdir / relative_path
    url = config.hyperlinks_file_link_format.replace("{path}", str(absolute_path))
    if line_number is not None:
        url = url.replace("{line}", str(line_number))
    else:
        url = url.replace("{line}", "")
    return format_osc8_hyperlink(url, display_text)


def get_workdir(config: Config) -> Path | None:
    entry = config.git_config_entries.get(WORKDIR_ENTRY_KEY)
    if isinstance(entry, PathEntry):
        return entry.path
    return None


def get_remote_repo(git_config: GitConfig | None) -> GitRemoteRepo | None:
    """Resolve the `origin` remote of the configured repository.

    Every failure (no repository, no origin, no URL, git errors) yields None.
    Nothing is cached between calls.
    """
    if git_config is None or git_config.repo is None:
        return None
    repo = git_config.repo
    try:
        remote = repo.find_remote(ORIGIN_REMOTE)
        if remote is None:
            logger.debug("origin_remote_missing", workdir=str(repo.workdir))
            return None
        url = remote.url()
        if url is None:
            logger.debug("origin_remote_has_no_url", workdir=str(repo.workdir))
            return None
        remote_repo = parse_remote_url(url, rewrites=repo.url_rewrites())
    except GitError as exc:
        logger.debug("remote_lookup_failed", workdir=str(repo.workdir), error=str(exc))
        return None

    if remote_repo is None:
        logger.debug("remote_url_unrecognized", url=url)
    return remote_repo


def resolve_github_repo(git_config: GitConfig | None) -> str | None:
    """Return `owner/name` when `origin` is a GitHub repository."""
    remote_repo = get_remote_repo(git_config)
    if isinstance(remote_repo, GitHubRepo):
        return remote_repo.repo
    return None


def _replace_commit(line: str, build_url: Callable[[str], str]) -> str:
    match: Match[str] | None = commit_line_pattern().search(line)
    if match is None:
        return line
    prefix, commit, suffix = match.group(1, 2, 3)
    return (
        line[: match.start()]
        + prefix
        + format_osc8_hyperlink(build_url(commit), commit)
        + suffix
        + line[match.end() :]
    )
