"""Score and recommendation synthesis."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal

from tfs_analyzer.catalog import DEFAULT_PENALTIES, category_for, recommendation_for
from tfs_analyzer.models import (
    Category,
    Finding,
    FunctionSignature,
    Recommendation,
    ScoreReport,
    Severity,
)


def score(
    functions: Sequence[FunctionSignature],
    findings: Sequence[Finding],
    *,
    penalties: Mapping[Severity, int] | None = None,
) -> ScoreReport:
    """Derive category scores from findings.

    Every category starts at 100 and loses the severity penalty of each
    finding whose code belongs to it. ``overall`` is the unweighted mean of
    the three categories, rounded half up. Functions carry no penalty of their
    own; malformed ones already surface as findings.
    """
    _ = functions
    effective_penalties = dict(DEFAULT_PENALTIES)
    if penalties:
        effective_penalties.update(penalties)

    points = {category: 100 for category in Category}
    for finding in findings:
        points[category_for(finding.code)] -= effective_penalties.get(finding.severity, 0)

    quality = _clamp(points[Category.QUALITY])
    performance = _clamp(points[Category.PERFORMANCE])
    security = _clamp(points[Category.SECURITY])
    return ScoreReport(
        overall=_round_half_up((quality + performance + security) / 3),
        quality=quality,
        performance=performance,
        security=security,
    )


def recommend(findings: Sequence[Finding]) -> list[Recommendation]:
    """One recommendation per error/warning finding, in finding order."""
    return [
        Recommendation(message=recommendation_for(finding.code), related_finding=finding)
        for finding in findings
        if finding.severity is not Severity.INFO
    ]


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(value: int, lower: int = 0, upper: int = 100) -> int:
    return max(lower, min(upper, value))
