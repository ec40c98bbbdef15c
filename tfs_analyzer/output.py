"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from tfs_analyzer import __version__
from tfs_analyzer.models import AnalysisResult, Finding, Severity

_SEVERITY_COLORS = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def render_human(result: AnalysisResult, *, source: str) -> str:
    """Render a compact colorized report for one script."""
    label, color = _score_grade(result.scores.overall)
    scores = result.scores
    lines: list[str] = [
        click.style(f"{source}: {scores.overall}/100 ({label})", fg=color, bold=True),
        f"  format: {result.format.value}, module: {result.module_type.value}",
        (
            f"  quality {scores.quality}, performance {scores.performance}, "
            f"security {scores.security}"
        ),
    ]

    if result.functions:
        lines.append(click.style("  Functions:", bold=True))
        for function in result.functions:
            qualified = f"{function.owner}.{function.name}" if function.owner else function.name
            lines.append(
                f"  - {qualified}({', '.join(function.parameters)})"
                f"{_line_suffix(function.line_number)}"
            )

    if result.findings:
        lines.append(click.style("  Findings:", bold=True))
        for finding in result.findings:
            lines.append(f"  - {_format_finding(finding)}")

    if result.recommendations:
        lines.append(click.style("  Recommendations:", bold=True))
        for index, recommendation in enumerate(result.recommendations, start=1):
            lines.append(f"  {index}. {recommendation.message}")
    return "\n".join(lines)


def render_json(reports: list[tuple[str, AnalysisResult]], *, timestamp: bool = True) -> str:
    """Render stable JSON: one object for one script, a ``results`` list otherwise."""
    payloads = [
        build_json_payload(result, source=source, timestamp=timestamp) for source, result in reports
    ]
    if len(payloads) == 1:
        return json.dumps(payloads[0], sort_keys=True)
    return json.dumps({"results": payloads}, sort_keys=True)


def build_json_payload(
    result: AnalysisResult, *, source: str, timestamp: bool = True
) -> dict[str, Any]:
    """Build the presentation payload for one analysis result.

    With ``timestamp=False`` the payload depends only on the script, so repeated
    runs produce identical output.
    """
    payload = result.to_dict()
    meta: dict[str, Any] = {"source": source, "version": __version__}
    if timestamp:
        meta["generated_at"] = (
            datetime.now(tz=UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
        )
    payload["meta"] = meta
    return payload


def _format_finding(finding: Finding) -> str:
    severity = click.style(
        finding.severity.value.upper(), fg=_SEVERITY_COLORS[finding.severity], bold=True
    )
    return f"{severity} [{finding.code}] {finding.message}{_line_suffix(finding.line_number)}"


def _line_suffix(line_number: int | None) -> str:
    return f" (line {line_number})" if line_number is not None else ""


def _score_grade(score: int) -> tuple[str, str]:
    if score >= 90:
        return ("GOOD", "green")
    if score >= 70:
        return ("FAIR", "yellow")
    return ("POOR", "red")
