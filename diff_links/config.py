"""Configuration loading for diff-links."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from diff_links.git import GitRepo, open_repo
from diff_links.remote import GitRemoteRepo, describe_remote_repo

CONFIG_FILENAMES = (".diff-links.toml", "diff-links.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("diff_links", "diff-links")

DEFAULT_FILE_LINK_FORMAT = "file://{path}"
WORKDIR_ENTRY_KEY = "diff-links.__workdir__"

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PathEntry:
    """Config entry holding a filesystem path."""

    path: Path


@dataclass(frozen=True, slots=True)
class RemoteEntry:
    """Config entry holding a resolved remote repository identifier.

    `build_config` never stores one: the remote is resolved on every call.
    The variant exists so callers may place a remote in the entry mapping.
    """

    repo: GitRemoteRepo


GitConfigEntry = PathEntry | RemoteEntry


@dataclass(slots=True)
class GitConfig:
    """Git metadata available to the formatters; `repo` is None outside a work tree."""

    repo: GitRepo | None = None


@dataclass(slots=True)
class Config:
    """Runtime configuration consumed by the hyperlink formatters."""

    hyperlinks: bool = False
    hyperlinks_commit_link_format: str | None = None
    hyperlinks_file_link_format: str = DEFAULT_FILE_LINK_FORMAT
    git_config: GitConfig | None = None
    git_config_entries: dict[str, GitConfigEntry] = field(default_factory=dict)


@dataclass(slots=True)
class HyperlinksConfig:
    """Hyperlink settings as written in config files."""

    enabled: bool = False
    commit_link_format: str | None = None
    file_link_format: str = DEFAULT_FILE_LINK_FORMAT

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "commit_link_format": self.commit_link_format,
            "file_link_format": self.file_link_format,
        }


@dataclass(slots=True)
class AppConfig:
    """Configuration values resolved from project files."""

    hyperlinks: HyperlinksConfig = field(default_factory=HyperlinksConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hyperlinks": self.hyperlinks.to_dict(),
            "source": self.source,
        }


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or repository-local files with precedence."""
    repo = repo.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = repo / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = repo / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def build_config(
    app_config: AppConfig,
    repo_path: Path,
    *,
    enabled: bool | None = None,
    commit_link_format: str | None = None,
    file_link_format: str | None = None,
) -> Config:
    """Combine file settings, CLI overrides and repository metadata into a Config."""
    settings = app_config.hyperlinks
    git_repo = open_repo(repo_path)
    entries: dict[str, GitConfigEntry] = {}
    if git_repo is not None:
        entries[WORKDIR_ENTRY_KEY] = PathEntry(git_repo.workdir)
    else:
        logger.debug("not_a_git_repository", path=str(repo_path))

    return Config(
        hyperlinks=settings.enabled if enabled is None else enabled,
        hyperlinks_commit_link_format=commit_link_format or settings.commit_link_format,
        hyperlinks_file_link_format=file_link_format or settings.file_link_format,
        git_config=GitConfig(repo=git_repo),
        git_config_entries=entries,
    )


def describe_config(config: Config) -> dict[str, Any]:
    """Return a JSON-friendly view of a runtime Config."""
    entries: dict[str, Any] = {}
    for key, entry in sorted(config.git_config_entries.items()):
        if isinstance(entry, PathEntry):
            entries[key] = str(entry.path)
        else:
            entries[key] = describe_remote_repo(entry.repo)
    return {
        "hyperlinks": config.hyperlinks,
        "commit_link_format": config.hyperlinks_commit_link_format,
        "file_link_format": config.hyperlinks_file_link_format,
        "entries": entries,
    }


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            "[hyperlinks]",
            "enabled = true",
            "# Defaults to GitHub commit URLs when origin is hosted on github.com.",
            '# commit_link_format = "https://example.com/commits/{commit}"',
            'file_link_format = "file://{path}"',
            '# file_link_format = "vscode://file{path}:{line}"',
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    hyperlinks_mapping = _as_table(mapping.get("hyperlinks"), "hyperlinks")
    return AppConfig(
        hyperlinks=_parse_hyperlinks_config(hyperlinks_mapping),
        source=source,
    )


def _parse_hyperlinks_config(value: dict[str, Any]) -> HyperlinksConfig:
    raw_commit = value.get("commit_link_format")
    commit_link_format = (
        None if raw_commit is None else _as_str(raw_commit, "hyperlinks.commit_link_format")
    )
    return HyperlinksConfig(
        enabled=_as_bool(value.get("enabled", False), "hyperlinks.enabled"),
        commit_link_format=commit_link_format or None,
        file_link_format=_as_str(
            value.get("file_link_format", DEFAULT_FILE_LINK_FORMAT),
            "hyperlinks.file_link_format",
        ),
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return raw
