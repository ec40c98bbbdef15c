"""Analysis orchestration."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from tfs_analyzer.checks import Check, scan
from tfs_analyzer.detection import detect_format, detect_module_type
from tfs_analyzer.extractor import extract
from tfs_analyzer.models import AnalysisInput, AnalysisResult, ModuleKind, Severity
from tfs_analyzer.scoring import recommend, score

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """Raised when the input is empty or not text."""


def analyze(
    content: str,
    tfs_version_hint: str | None = None,
    module_type_hint: str | None = None,
    *,
    checks: list[Check] | None = None,
    penalties: Mapping[Severity, int] | None = None,
) -> AnalysisResult:
    """Analyze one script and return its full report.

    Problems inside the script never raise; they are reported as findings.
    Only a non-string or empty ``content`` raises :class:`InputError`.
    ``module_type_hint`` is used only when detection finds no module kind.
    """
    if not isinstance(content, str):
        raise InputError(f"Script content must be text, got {type(content).__name__}.")
    if content == "":
        raise InputError("Script content is empty.")

    format_kind = detect_format(content)
    module_type = detect_module_type(content, format_kind)
    if module_type is ModuleKind.UNKNOWN:
        hinted = ModuleKind.parse(module_type_hint)
        if hinted is not None:
            logger.debug("using module type hint %s", hinted.value)
            module_type = hinted

    extraction = extract(content, format_kind)
    findings = list(extraction.findings)
    findings.extend(
        scan(
            content,
            format_kind,
            module_type,
            checks=checks,
            tfs_version=tfs_version_hint,
        )
    )

    result = AnalysisResult(
        format=format_kind,
        module_type=module_type,
        functions=tuple(extraction.functions),
        findings=tuple(findings),
        recommendations=tuple(recommend(findings)),
        scores=score(extraction.functions, findings, penalties=penalties),
    )
    logger.debug(
        "analysis done: format=%s module=%s functions=%d findings=%d overall=%d",
        result.format.value,
        result.module_type.value,
        len(result.functions),
        len(result.findings),
        result.scores.overall,
    )
    return result


def analyze_input(
    request: AnalysisInput,
    *,
    checks: list[Check] | None = None,
    penalties: Mapping[Severity, int] | None = None,
) -> AnalysisResult:
    """Analyze an :class:`AnalysisInput` value."""
    return analyze(
        request.content,
        request.tfs_version_hint,
        request.module_type_hint,
        checks=checks,
        penalties=penalties,
    )
