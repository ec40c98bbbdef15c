"""Table literal syntax check."""

from __future__ import annotations

from re import compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.lua_text import line_number
from tfs_analyzer.models import Finding

# `[` opening a value, excluding `[[`/`[==[` long strings and `==`, `~=` comparisons.
LOOSE_BRACKET_RE = compile(r"(?:(?<![=~<>])=|\breturn\b|\()[ \t]*\[(?![\[=])")


class TableSyntaxCheck:
    """Flags data tables opened with a bare bracket and unbalanced braces."""

    check_id = "table_syntax"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        findings: list[Finding] = []
        seen_lines: set[int] = set()
        for match in LOOSE_BRACKET_RE.finditer(source.code):
            lineno = line_number(source.code, match.end() - 1)
            if lineno in seen_lines:
                continue
            seen_lines.add(lineno)
            findings.append(
                make_finding(
                    "BAD_TABLE_SYNTAX",
                    "Table literal opened with '[' instead of '{'.",
                    line_number=lineno,
                )
            )

        opened = source.code.count("{")
        closed = source.code.count("}")
        if opened != closed:
            findings.append(
                make_finding(
                    "BAD_TABLE_SYNTAX",
                    f"Unbalanced table braces: {opened} '{{' vs {closed} '}}'.",
                )
            )
        return findings
