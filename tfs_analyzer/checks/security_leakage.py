"""Embedded secrets and raw SQL check."""

from __future__ import annotations

from re import IGNORECASE, compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.models import Finding

CREDENTIAL_ASSIGNMENT_RE = compile(
    r"\b\w*(?:password|passwd|secret|api_?key|token)\s*=\s*([\"'])[^\"'\n]{3,}\1",
    IGNORECASE,
)
KEY_LITERAL_RE = compile(r"\b(?:sk-[A-Za-z0-9_-]{20,}|AKIA[0-9A-Z]{16}|ghp_[A-Za-z0-9]{36})\b")
SQL_STATEMENT_RE = compile(
    r"\b(?:SELECT\b.+\bFROM|INSERT\s+INTO|UPDATE\b.+\bSET|DELETE\s+FROM|REPLACE\s+INTO)\b",
    IGNORECASE,
)

PATTERNS = [
    ("credential", "Credential-like literal assigned in script."),
    ("key", "API key literal embedded in script."),
    ("sql", "SQL built by string concatenation without db.escapeString()."),
]


class SecurityLeakageCheck:
    """Finds secrets and injectable SQL embedded in scripts."""

    check_id = "security_leakage"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        findings: list[Finding] = []
        for lineno, line in enumerate(source.code_with_strings.split("\n"), start=1):
            for kind, message in PATTERNS:
                if _line_matches(kind, line):
                    findings.append(make_finding("SECURITY_LEAKAGE", message, line_number=lineno))
                    break
        return findings


def _line_matches(kind: str, line: str) -> bool:
    if kind == "credential":
        return CREDENTIAL_ASSIGNMENT_RE.search(line) is not None
    if kind == "key":
        return KEY_LITERAL_RE.search(line) is not None
    return (
        SQL_STATEMENT_RE.search(line) is not None
        and ".." in line
        and "escapeString" not in line
    )
