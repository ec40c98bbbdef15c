"""Finding code catalog.

Every finding code the analyzer can emit is declared here exactly once, with
its severity, the score category it counts against and the remediation text
used for recommendations. Checks build findings through :func:`make_finding`
so the severity of a code cannot drift between call sites.
"""

from __future__ import annotations

from dataclasses import dataclass

from tfs_analyzer.models import Category, Finding, Severity

DEFAULT_PENALTIES: dict[Severity, int] = {
    Severity.ERROR: 20,
    Severity.WARNING: 8,
    Severity.INFO: 2,
}


@dataclass(frozen=True, slots=True)
class CodeInfo:
    """Catalog row for one finding code."""

    code: str
    severity: Severity
    category: Category
    title: str
    recommendation: str


_ROWS = (
    CodeInfo(
        code="BAD_TABLE_SYNTAX",
        severity=Severity.ERROR,
        category=Category.QUALITY,
        title="Table literal opened with '['.",
        recommendation=(
            "Lua tables are written with braces: use `{1, 2, 3}` or `{[key] = value}` "
            "instead of a bare `[`."
        ),
    ),
    CodeInfo(
        code="MISSING_REGISTRATION",
        severity=Severity.WARNING,
        category=Category.QUALITY,
        title="Handler is never registered.",
        recommendation=(
            "Call `<object>:register()` after defining the handler, or add the matching "
            "entry to the XML registration file."
        ),
    ),
    CodeInfo(
        code="MISSING_RETURN",
        severity=Severity.WARNING,
        category=Category.QUALITY,
        title="Handler does not return a value.",
        recommendation="End the handler with `return true` (or `return false` to block the event).",
    ),
    CodeInfo(
        code="SECURITY_LEAKAGE",
        severity=Severity.ERROR,
        category=Category.SECURITY,
        title="Secret or raw SQL embedded in script.",
        recommendation=(
            "Move credentials to the server configuration and build queries with "
            "`db.escapeString()` around every interpolated value."
        ),
    ),
    CodeInfo(
        code="UNSAFE_EXECUTION",
        severity=Severity.ERROR,
        category=Category.SECURITY,
        title="Dynamic code or shell execution.",
        recommendation=(
            "Avoid `os.execute`, `io.popen`, `loadstring` and `dofile` on runtime input; "
            "use explicit lookup tables instead."
        ),
    ),
    CodeInfo(
        code="DIALECT_MIX",
        severity=Severity.WARNING,
        category=Category.QUALITY,
        title="Legacy global function used in a RevScript script.",
        recommendation=(
            "Replace legacy globals with the object API, e.g. "
            "`player:sendTextMessage()` instead of `doPlayerSendTextMessage()`."
        ),
    ),
    CodeInfo(
        code="MALFORMED_SIGNATURE",
        severity=Severity.WARNING,
        category=Category.QUALITY,
        title="Function header could not be parsed.",
        recommendation="Close the parameter list on the same line as `function name(`.",
    ),
    CodeInfo(
        code="DEBUG_PRINT",
        severity=Severity.INFO,
        category=Category.PERFORMANCE,
        title="print() left in script.",
        recommendation=(
            "Remove debug `print()` calls; they write to the server console on every event."
        ),
    ),
    CodeInfo(
        code="VERSION_MISMATCH",
        severity=Severity.INFO,
        category=Category.QUALITY,
        title="RevScript syntax on a pre-1.3 server.",
        recommendation="RevScriptSys needs TFS 1.3 or newer; port the script to the XML format.",
    ),
)

CATALOG: dict[str, CodeInfo] = {row.code: row for row in _ROWS}


def lookup(code: str) -> CodeInfo:
    """Return the catalog row for ``code``."""
    info = CATALOG.get(code)
    if info is None:
        raise KeyError(f"Unknown finding code: {code}")
    return info


def make_finding(code: str, message: str | None = None, line_number: int | None = None) -> Finding:
    """Build a finding whose severity comes from the catalog."""
    info = lookup(code)
    return Finding(
        severity=info.severity,
        code=code,
        message=message or info.title,
        line_number=line_number,
    )


def category_for(code: str) -> Category:
    """Category for ``code``; codes outside the catalog count against quality."""
    info = CATALOG.get(code)
    return info.category if info is not None else Category.QUALITY


def recommendation_for(code: str) -> str:
    info = CATALOG.get(code)
    if info is None:
        return f"Review the reported issue ({code})."
    return info.recommendation
