"""Configuration loading for tfs-analyzer."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tfs_analyzer.catalog import DEFAULT_PENALTIES
from tfs_analyzer.models import Severity

CONFIG_FILENAMES = (".tfs-analyzer.toml", "tfs-analyzer.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("tfs_analyzer", "tfs-analyzer")

DEFAULT_INCLUDE = ["*.lua", "*.xml"]


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    fail_below: int | None = None
    tfs_version: str | None = None
    include: list[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: list[str] = field(default_factory=list)
    check_enable: list[str] | None = None
    check_disable: list[str] = field(default_factory=list)
    penalties: dict[Severity, int] = field(default_factory=lambda: dict(DEFAULT_PENALTIES))
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_below": self.fail_below,
            "tfs_version": self.tfs_version,
            "include": list(self.include),
            "exclude": list(self.exclude),
            "checks": {
                "enable": list(self.check_enable) if self.check_enable is not None else None,
                "disable": list(self.check_disable),
            },
            "penalties": {severity.value: points for severity, points in self.penalties.items()},
            "source": self.source,
        }


def load_app_config(project: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or project-local files with precedence."""
    project = project.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (project / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = project / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = project / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'format = "human"',
            "fail_below = 70",
            'tfs_version = "1.4"',
            'include = ["*.lua", "*.xml"]',
            'exclude = ["lib/**"]',
            "",
            "[checks]",
            "enable = [",
            '  "table_syntax",',
            '  "registration",',
            '  "return_value",',
            '  "security_leakage",',
            '  "unsafe_execution",',
            '  "dialect_mix",',
            '  "debug_output",',
            '  "version_compat",',
            "]",
            'disable = ["debug_output"]',
            "",
            "[penalties]",
            "error = 20",
            "warning = 8",
            "info = 2",
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
    checks_mapping = _as_table(mapping.get("checks"), "checks")
    penalties_mapping = _as_table(mapping.get("penalties"), "penalties")

    raw_format = mapping.get("format", "human")
    format_value = str(raw_format).lower()
    if format_value not in {"human", "json"}:
        format_value = "human"

    fail_below_raw = mapping.get("fail_below")
    fail_below = None if fail_below_raw is None else _as_int(fail_below_raw, "fail_below")
    if fail_below is not None and not 0 <= fail_below <= 100:
        raise ValueError("fail_below must be between 0 and 100")

    tfs_version_raw = mapping.get("tfs_version")
    if isinstance(tfs_version_raw, (int, float)) and not isinstance(tfs_version_raw, bool):
        tfs_version_raw = str(tfs_version_raw)
    tfs_version = None if tfs_version_raw is None else _as_str(tfs_version_raw, "tfs_version")

    include = _as_str_list(mapping.get("include"), "include")
    return AppConfig(
        format=format_value,
        fail_below=fail_below,
        tfs_version=tfs_version,
        include=include if include else list(DEFAULT_INCLUDE),
        exclude=_as_str_list(mapping.get("exclude"), "exclude"),
        check_enable=_as_str_list_or_none(checks_mapping.get("enable"), "checks.enable"),
        check_disable=_as_str_list(checks_mapping.get("disable"), "checks.disable"),
        penalties=_parse_penalties(penalties_mapping),
        source=source,
    )


def _parse_penalties(value: dict[str, Any]) -> dict[Severity, int]:
    penalties = dict(DEFAULT_PENALTIES)
    allowed = {severity.value: severity for severity in Severity}
    for key, raw in value.items():
        severity = allowed.get(str(key).lower())
        if severity is None:
            choices = ", ".join(sorted(allowed))
            raise ValueError(f"penalties keys must be one of: {choices}")
        points = _as_int(raw, f"penalties.{key}")
        if points < 0:
            raise ValueError(f"penalties.{key} must be non-negative, got {points}")
        penalties[severity] = points
    return penalties


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{field_name} must be a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any, field_name: str) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value, field_name)


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw
