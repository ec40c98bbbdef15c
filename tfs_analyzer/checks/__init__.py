"""Checks package."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from tfs_analyzer.checks.base import Check, ScriptSource
from tfs_analyzer.checks.debug_output import DebugOutputCheck
from tfs_analyzer.checks.dialect_mix import DialectMixCheck
from tfs_analyzer.checks.registration import RegistrationCheck
from tfs_analyzer.checks.return_value import ReturnValueCheck
from tfs_analyzer.checks.security_leakage import SecurityLeakageCheck
from tfs_analyzer.checks.table_syntax import TableSyntaxCheck
from tfs_analyzer.checks.unsafe_execution import UnsafeExecutionCheck
from tfs_analyzer.checks.version_compat import VersionCompatCheck
from tfs_analyzer.models import Finding, FormatKind, ModuleKind

logger = logging.getLogger(__name__)

__all__ = [
    "Check",
    "CheckInfo",
    "ScriptSource",
    "build_checks",
    "default_checks",
    "list_check_info",
    "scan",
]


@dataclass(frozen=True, slots=True)
class CheckInfo:
    """Check metadata for listing and selection."""

    check_id: str
    name: str
    description: str
    codes: tuple[str, ...]
    default_enabled: bool


@dataclass(frozen=True, slots=True)
class _CheckSpec:
    check_id: str
    factory: Callable[[], Check]
    name: str
    description: str
    codes: tuple[str, ...]
    default_enabled: bool


def default_checks() -> list[Check]:
    """Return the default check battery in evaluation order."""
    return build_checks()


def build_checks(
    *,
    enabled_check_ids: list[str] | None = None,
    disabled_check_ids: list[str] | None = None,
) -> list[Check]:
    """Build check instances applying enable/disable filters.

    ``enabled_check_ids`` replaces the default selection when given; the
    evaluation order always follows the registry.
    """
    specs = _ordered_check_specs()
    registry = {spec.check_id: spec for spec in specs}
    requested_ids = set(enabled_check_ids or []) | set(disabled_check_ids or [])

    unknown = [check_id for check_id in requested_ids if check_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown check ids: {joined}")

    disabled_set = set(disabled_check_ids or [])
    if enabled_check_ids is None:
        selected = [spec for spec in specs if spec.default_enabled]
    else:
        enabled_set = set(enabled_check_ids)
        selected = [spec for spec in specs if spec.check_id in enabled_set]
    return [spec.factory() for spec in selected if spec.check_id not in disabled_set]


def list_check_info() -> list[CheckInfo]:
    """Return metadata for all known checks."""
    return [
        CheckInfo(
            check_id=spec.check_id,
            name=spec.name,
            description=spec.description,
            codes=spec.codes,
            default_enabled=spec.default_enabled,
        )
        for spec in _ordered_check_specs()
    ]


def scan(
    content: str,
    format: FormatKind,
    module_type: ModuleKind,
    *,
    checks: list[Check] | None = None,
    tfs_version: str | None = None,
) -> list[Finding]:
    """Run every check over ``content`` and concatenate their findings."""
    source = ScriptSource(
        content=content,
        format=format,
        module_type=module_type,
        tfs_version=tfs_version,
    )
    active_checks = checks if checks is not None else default_checks()
    findings: list[Finding] = []
    for check in active_checks:
        produced = check.evaluate(source)
        if produced:
            logger.debug("check %s produced %d finding(s)", check.check_id, len(produced))
        findings.extend(produced)
    return findings


def _ordered_check_specs() -> list[_CheckSpec]:
    return [
        _spec(TableSyntaxCheck, codes=("BAD_TABLE_SYNTAX",)),
        _spec(RegistrationCheck, codes=("MISSING_REGISTRATION",)),
        _spec(ReturnValueCheck, codes=("MISSING_RETURN",)),
        _spec(SecurityLeakageCheck, codes=("SECURITY_LEAKAGE",)),
        _spec(UnsafeExecutionCheck, codes=("UNSAFE_EXECUTION",)),
        _spec(DialectMixCheck, codes=("DIALECT_MIX",)),
        _spec(DebugOutputCheck, codes=("DEBUG_PRINT",)),
        _spec(VersionCompatCheck, codes=("VERSION_MISMATCH",)),
    ]


def _spec(
    check_cls: type[Check],
    *,
    codes: tuple[str, ...],
    default_enabled: bool = True,
) -> _CheckSpec:
    return _CheckSpec(
        check_id=check_cls.check_id,
        factory=check_cls,
        name=check_cls.__name__,
        description=(check_cls.__doc__ or "").strip(),
        codes=codes,
        default_enabled=default_enabled,
    )
