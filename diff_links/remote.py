"""Remote repository identifiers parsed from git remote URLs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from re import compile

GITHUB_REMOTE_RE = compile(
    r"^(?:(?:https?|git|ssh)://)?(?:[\w.-]+@)?github\.com[:/]"
    r"(?P<repo>[\w.-]+/[\w.-]+?)(?:\.git)?/?$"
)
GITLAB_REMOTE_RE = compile(
    r"^(?:(?:https?|git|ssh)://)?(?:[\w.-]+@)?gitlab\.com[:/]"
    r"(?P<repo>[\w.-]+(?:/[\w.-]+)*/[\w.-]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True, slots=True)
class GitHubRepo:
    """A repository hosted on github.com, identified as `owner/name`."""

    repo: str

    def commit_url(self, commit: str) -> str:
        return f"https://github.com/{self.repo}/commit/{commit}"


@dataclass(frozen=True, slots=True)
class GitLabRepo:
    """A repository hosted on gitlab.com, identified by its full project path."""

    repo: str

    def commit_url(self, commit: str) -> str:
        return f"https://gitlab.com/{self.repo}/-/commit/{commit}"


@dataclass(frozen=True, slots=True)
class UnknownRemoteRepo:
    """A remote whose hosting provider is not recognized."""

    url: str

    def commit_url(self, commit: str) -> str | None:
        _ = commit
        return None


GitRemoteRepo = GitHubRepo | GitLabRepo | UnknownRemoteRepo


def parse_remote_url(
    url: str, rewrites: Mapping[str, str] | None = None
) -> GitRemoteRepo | None:
    """Parse a raw remote URL, applying `insteadOf` rewrites first.

    Returns None for an empty URL.
    """
    resolved = apply_url_rewrites(url.strip(), rewrites or {})
    if not resolved:
        return None

    github_match = GITHUB_REMOTE_RE.match(resolved)
    if github_match is not None:
        return GitHubRepo(repo=github_match.group("repo"))

    gitlab_match = GITLAB_REMOTE_RE.match(resolved)
    if gitlab_match is not None:
        return GitLabRepo(repo=gitlab_match.group("repo"))

    return UnknownRemoteRepo(url=resolved)


def apply_url_rewrites(url: str, rewrites: Mapping[str, str]) -> str:
    """Apply git `url.<base>.insteadOf` rules to `url`.

    `rewrites` maps the `insteadOf` prefix to its replacement base. As in git,
    the longest matching prefix wins and only one rule is applied.
    """
    best_prefix = ""
    for prefix in rewrites:
        if url.startswith(prefix) and len(prefix) > len(best_prefix):
            best_prefix = prefix
    if not best_prefix:
        return url
    return rewrites[best_prefix] + url[len(best_prefix) :]


def describe_remote_repo(remote_repo: GitRemoteRepo) -> dict[str, str]:
    """Return a JSON-friendly description of a remote identifier."""
    if isinstance(remote_repo, GitHubRepo):
        return {"kind": "github", "repo": remote_repo.repo}
    if isinstance(remote_repo, GitLabRepo):
        return {"kind": "gitlab", "repo": remote_repo.repo}
    return {"kind": "unknown", "url": remote_repo.url}
