"""Debug print check."""

from __future__ import annotations

from re import compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.lua_text import line_number
from tfs_analyzer.models import Finding

PRINT_CALL_RE = compile(r"(?<![.:\w])print\s*\(")


class DebugOutputCheck:
    """Notes print() calls left behind in handlers."""

    check_id = "debug_output"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        return [
            make_finding(
                "DEBUG_PRINT",
                "print() writes to the server console.",
                line_number=line_number(source.code, match.start()),
            )
            for match in PRINT_CALL_RE.finditer(source.code)
        ]
