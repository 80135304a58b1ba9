"""CLI entrypoint for diff-links."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import structlog
import typer

from diff_links import __version__
from diff_links.config import (
    CONFIG_FILENAMES,
    AppConfig,
    Config,
    build_config,
    default_config_template,
    describe_config,
    load_app_config,
)
from diff_links.git import GitError, get_diff_between, get_log_patch, get_working_tree_diff
from diff_links.hyperlinks import get_remote_repo
from diff_links.logging_config import configure_logging
from diff_links.remote import describe_remote_repo
from diff_links.render import hyperlink_text

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="diff-links",
    no_args_is_help=True,
    help="Turn commit hashes and file paths in git diffs into terminal hyperlinks.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Root command callback."""
    _ = version
    configure_logging(verbose)


@app.command("render")
def render_command(
    diff_file: Annotated[Path | None, typer.Option(help="Path to unified diff file.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read diff or log text from stdin.")] = False,
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    base: Annotated[str | None, typer.Option(help="Base git revision.")] = None,
    head: Annotated[str | None, typer.Option(help="Head git revision.")] = None,
    log: Annotated[
        str | None, typer.Option("--log", help="Render `git log -p` for this revision range.")
    ] = None,
    max_count: Annotated[
        int | None, typer.Option(help="Limit the number of commits rendered with --log.")
    ] = None,
    hyperlinks: Annotated[
        bool | None,
        typer.Option("--hyperlinks/--no-hyperlinks", help="Enable or disable hyperlinks."),
    ] = None,
    commit_link_format: Annotated[
        str | None, typer.Option(help="Commit URL template containing {commit}.")
    ] = None,
    file_link_format: Annotated[
        str | None, typer.Option(help="File URL template containing {path} and {line}.")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Render a diff or log with commit and file hyperlinks."""
    sources = [diff_file is not None, stdin, log is not None, base is not None or head is not None]
    if sum(sources) > 1:
        raise typer.BadParameter("Use only one of --diff-file, --stdin, --log or --base/--head.")

    if (base is None) ^ (head is None):
        raise typer.BadParameter("Provide both --base and --head together.")

    app_config = _load_config_or_raise(repo, config_file)
    config = build_config(
        app_config,
        repo,
        enabled=hyperlinks,
        commit_link_format=commit_link_format,
        file_link_format=file_link_format,
    )

    try:
        text, input_source = _resolve_input(
            diff_file=diff_file,
            stdin=stdin,
            repo=repo,
            base=base,
            head=head,
            log=log,
            max_count=max_count,
        )
    except GitError as exc:
        raise typer.BadParameter(str(exc)) from exc

    logger.debug("render_input", source=input_source, hyperlinks=config.hyperlinks)
    typer.echo(hyperlink_text(text, config), nl=False)


@app.command("remote")
def remote_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
) -> None:
    """Show how the origin remote is recognized for commit links."""
    config = build_config(AppConfig(), repo)
    remote_repo = get_remote_repo(config.git_config)
    if remote_repo is None:
        typer.echo("no recognized origin remote")
        raise typer.Exit(code=1)

    payload: dict[str, str | None] = dict(describe_remote_repo(remote_repo))
    payload["commit_url"] = remote_repo.commit_url("{commit}")
    typer.echo(json.dumps(payload, sort_keys=True))


@app.command("config-init")
def config_init_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    force: Annotated[bool, typer.Option(help="Overwrite an existing config file.")] = False,
) -> None:
    """Write a starter .diff-links.toml."""
    target = repo.resolve() / CONFIG_FILENAMES[0]
    if target.exists() and not force:
        raise typer.BadParameter(f"{target} already exists; pass --force to overwrite.")
    target.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote {target}")


@app.command("config-validate")
def config_validate_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Validate config files and print the resolved settings as JSON."""
    app_config = _load_config_or_raise(repo, config_file)
    config: Config = build_config(app_config, repo)
    payload = {
        "config": app_config.to_dict(),
        "resolved": describe_config(config),
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _resolve_input(
    *,
    diff_file: Path | None,
    stdin: bool,
    repo: Path,
    base: str | None,
    head: str | None,
    log: str | None,
    max_count: int | None,
) -> tuple[str, str]:
    if diff_file is not None:
        if not diff_file.exists():
            raise typer.BadParameter(f"Diff file does not exist: {diff_file}")
        return (diff_file.read_text(encoding="utf-8"), f"file:{diff_file}")
    if stdin:
        return (sys.stdin.read(), "stdin")
    if log is not None:
        return (get_log_patch(repo, log, max_count=max_count), f"log:{log}")
    if base is not None and head is not None:
        return (get_diff_between(repo, base, head), f"git:{base}..{head}")
    return (get_working_tree_diff(repo), "git:working-tree")
