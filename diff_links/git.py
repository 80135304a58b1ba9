"""Git subprocess helpers."""

from __future__ import annotations

from pathlib import Path
from subprocess import CalledProcessError, run

URL_INSTEADOF_PATTERN = r"^url\..*\.insteadof$"


class GitError(RuntimeError):
    """Raised when git command execution fails."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class GitRemote:
    """A named remote of a repository."""

    def __init__(self, repo: GitRepo, name: str) -> None:
        self.repo = repo
        self.name = name

    def url(self) -> str | None:
        """Return the configured (unrewritten) fetch URL, if any."""
        try:
            value = _run_git(self.repo.workdir, ["config", "--get", f"remote.{self.name}.url"])
        except GitError as exc:
            if exc.returncode == 1:
                return None
            raise
        return value.strip() or None


class GitRepo:
    """Handle on a git work tree, queried through the git CLI."""

    def __init__(self, workdir: Path) -> None:
        self.workdir = workdir

    def remote_names(self) -> list[str]:
        return _run_git(self.workdir, ["remote"]).split()

    def find_remote(self, name: str) -> GitRemote | None:
        """Return the remote called `name`, or None when it does not exist."""
        if name not in self.remote_names():
            return None
        return GitRemote(self, name)

    def url_rewrites(self) -> dict[str, str]:
        """Return `insteadOf` prefix -> replacement base from the git config."""
        try:
            output = _run_git(
                self.workdir,
                ["config", "--get-regexp", URL_INSTEADOF_PATTERN],
            )
        except GitError as exc:
            if exc.returncode == 1:
                return {}
            raise

        rewrites: dict[str, str] = {}
        for raw_line in output.splitlines():
            key, _, prefix = raw_line.partition(" ")
            if not prefix:
                continue
            base = key[len("url.") : -len(".insteadof")]
            rewrites[prefix] = base
        return rewrites


def open_repo(path: Path) -> GitRepo | None:
    """Return the repository containing `path`, or None outside a work tree."""
    try:
        toplevel = _run_git(path, ["rev-parse", "--show-toplevel"]).strip()
    except GitError:
        return None
    if not toplevel:
        return None
    return GitRepo(Path(toplevel))


def get_working_tree_diff(repo: Path) -> str:
    """Return working tree diff for a repository."""
    return _run_git(repo, ["diff", "--no-color"])


def get_diff_between(repo: Path, base: str, head: str) -> str:
    """Return diff between two revisions."""
    return _run_git(repo, ["diff", "--no-color", f"{base}..{head}"])


def get_log_patch(repo: Path, revision_range: str, max_count: int | None = None) -> str:
    """Return `git log -p` output for a revision range."""
    args = ["log", "-p", "--no-color", "--no-abbrev-commit"]
    if max_count is not None:
        args.append(f"--max-count={max_count}")
    args.append(revision_range)
    return _run_git(repo, args)


def _run_git(repo: Path, args: list[str]) -> str:
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed", exc.returncode) from exc
    except OSError as exc:
        raise GitError(f"could not run git: {exc}") from exc

    return completed.stdout
