"""CLI entrypoint for tfs-analyzer."""

from __future__ import annotations

import fnmatch
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from tfs_analyzer import __version__
from tfs_analyzer.analyzer import InputError, analyze
from tfs_analyzer.checks import Check, build_checks, list_check_info
from tfs_analyzer.config import AppConfig, default_config_template, load_app_config
from tfs_analyzer.detection import detect_format, detect_module_type
from tfs_analyzer.models import AnalysisResult, ModuleKind
from tfs_analyzer.output import render_human, render_json

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="tfs-analyzer",
    no_args_is_help=True,
    help="Analyze The Forgotten Server Lua/XML scripts and score their quality.",
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
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug details.")] = False,
) -> None:
    """Root command callback."""
    _ = version
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


@app.command("analyze")
def analyze_command(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(help="Script files or directories to analyze."),
    ] = None,
    stdin: Annotated[bool, typer.Option(help="Read one script from stdin.")] = False,
    project: Annotated[Path, typer.Option(help="Project path used to find config.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    tfs_version: Annotated[
        str | None, typer.Option("--tfs-version", help="Target TFS version, e.g. 1.4.")
    ] = None,
    module_type: Annotated[
        str | None,
        typer.Option("--module-type", help="Module kind to assume when it cannot be detected."),
    ] = None,
    include: Annotated[list[str] | None, typer.Option(help="Include glob pattern.")] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Exclude glob pattern.")] = None,
    fail_below: Annotated[
        int | None, typer.Option(help="Exit nonzero if any overall score is below this value.")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    timestamp: Annotated[
        bool,
        typer.Option("--timestamp/--no-timestamp", help="Stamp JSON output with generated_at."),
    ] = True,
) -> None:
    """Analyze scripts and print their reports."""
    app_config = _load_config_or_raise(project, config_file)
    output_format = (format or app_config.format).lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    if paths and stdin:
        raise typer.BadParameter("Use either PATHS or --stdin, not both.")
    if module_type is not None and ModuleKind.parse(module_type) is None:
        choices = ", ".join(kind.value for kind in ModuleKind if kind is not ModuleKind.UNKNOWN)
        raise typer.BadParameter(
            f"--module-type must be one of: {choices}", param_hint="--module-type"
        )

    inputs = _collect_inputs(
        paths=paths or [],
        stdin=stdin,
        includes=include if include is not None else app_config.include,
        excludes=exclude if exclude is not None else app_config.exclude,
    )
    checks = _build_configured_checks_or_raise(app_config)
    resolved_version = tfs_version if tfs_version is not None else app_config.tfs_version

    reports: list[tuple[str, AnalysisResult]] = []
    for source, content in inputs:
        try:
            result = analyze(
                content,
                resolved_version,
                module_type,
                checks=checks,
                penalties=app_config.penalties,
            )
        except InputError as exc:
            raise typer.BadParameter(f"{source}: {exc}") from exc
        reports.append((source, result))

    if output_format == "json":
        typer.echo(render_json(reports, timestamp=timestamp))
    else:
        typer.echo("\n\n".join(render_human(result, source=source) for source, result in reports))

    threshold = fail_below if fail_below is not None else app_config.fail_below
    if threshold is not None and any(result.scores.overall < threshold for _, result in reports):
        raise typer.Exit(code=1)


@app.command("detect")
def detect_command(
    path: Annotated[Path | None, typer.Argument(help="Script file to classify.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read the script from stdin.")] = False,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Print the detected format and module kind of a script."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    if (path is None) == (not stdin):
        raise typer.BadParameter("Provide exactly one of PATH or --stdin.")

    content = sys.stdin.read() if stdin else _read_script(path)
    format_kind = detect_format(content)
    module_kind = detect_module_type(content, format_kind)

    if output_format == "json":
        typer.echo(
            json.dumps(
                {"format": format_kind.value, "moduleType": module_kind.value}, sort_keys=True
            )
        )
        return
    typer.echo(f"format: {format_kind.value}\nmodule: {module_kind.value}")


@app.command("checks")
def checks_command(
    project: Annotated[Path, typer.Option(help="Project path used to find config.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available checks and whether they are enabled."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(project, config_file)
    active_ids = {check.check_id for check in _build_configured_checks_or_raise(app_config)}
    check_info = list_check_info()

    if output_format == "json":
        payload = {
            "checks": [
                {
                    "check_id": item.check_id,
                    "name": item.name,
                    "description": item.description,
                    "codes": list(item.codes),
                    "default_enabled": item.default_enabled,
                    "enabled": item.check_id in active_ids,
                }
                for item in check_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available checks:"]
    for item in check_info:
        status = "enabled" if item.check_id in active_ids else "disabled"
        lines.append(f"- {item.check_id} [{status}] - {item.description}")
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    project: Annotated[Path, typer.Option(help="Project path used to find config.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(project, config_file)
    active_checks = _build_configured_checks_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_check_ids"] = [check.check_id for check in active_checks]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- fail_below: {payload['fail_below']}",
        f"- tfs_version: {payload['tfs_version']}",
        f"- include: {payload['include']}",
        f"- exclude: {payload['exclude']}",
        f"- checks.enable: {payload['checks']['enable']}",
        f"- checks.disable: {payload['checks']['disable']}",
        f"- penalties: {payload['penalties']}",
        f"- active_check_ids: {payload['active_check_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".tfs-analyzer.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter project config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@app.command("config-validate")
def config_validate_command(
    project: Annotated[Path, typer.Option(help="Project path used to find config.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".tfs-analyzer.toml"),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a config file and report active checks."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(project, config_file)
    active_checks = _build_configured_checks_or_raise(app_config)
    payload = {
        "ok": True,
        "source": app_config.source,
        "active_check_ids": [check.check_id for check in active_checks],
    }
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- active_check_ids: {payload['active_check_ids']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _collect_inputs(
    *,
    paths: list[Path],
    stdin: bool,
    includes: list[str],
    excludes: list[str],
) -> list[tuple[str, str]]:
    if stdin:
        return [("stdin", sys.stdin.read())]
    if not paths:
        raise typer.BadParameter("Provide script PATHS or --stdin.")

    inputs: list[tuple[str, str]] = []
    for path in paths:
        if path.is_dir():
            for script in _walk_scripts(path, includes=includes, excludes=excludes):
                inputs.append((str(script), _read_script(script)))
        else:
            inputs.append((str(path), _read_script(path)))

    if not inputs:
        raise typer.BadParameter("No scripts matched the include/exclude patterns.")
    return inputs


def _walk_scripts(root: Path, *, includes: list[str], excludes: list[str]) -> list[Path]:
    scripts: list[Path] = []
    for candidate in sorted(root.rglob("*")):
        if not candidate.is_file():
            continue
        relative = candidate.relative_to(root).as_posix()
        if includes and not _matches_any(relative, candidate.name, includes):
            continue
        if excludes and _matches_any(relative, candidate.name, excludes):
            continue
        scripts.append(candidate)
    logger.debug("found %d script(s) under %s", len(scripts), root)
    return scripts


def _matches_any(relative: str, name: str, patterns: list[str]) -> bool:
    return any(
        fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(name, pattern)
        for pattern in patterns
    )


def _read_script(path: Path | None) -> str:
    if path is None or not path.is_file():
        raise typer.BadParameter(f"Script file does not exist: {path}")
    return path.read_text(encoding="utf-8", errors="replace")


def _load_config_or_raise(project: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(project, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_checks_or_raise(app_config: AppConfig) -> list[Check]:
    try:
        return build_checks(
            enabled_check_ids=app_config.check_enable,
            disabled_check_ids=app_config.check_disable,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.checks") from exc
