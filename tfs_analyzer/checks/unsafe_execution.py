"""Dynamic code and shell execution check."""

from __future__ import annotations

from re import compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.models import Finding

PATTERNS = [
    (compile(r"\bos\.execute\s*\("), False, "Shell command executed with os.execute()."),
    (compile(r"\bio\.popen\s*\("), False, "Shell pipe opened with io.popen()."),
    (compile(r"\bloadstring\s*\("), False, "Code compiled at runtime with loadstring()."),
    (compile(r"\bdofile\s*\("), True, "dofile() called with a built path."),
]


class UnsafeExecutionCheck:
    """Flags shell access and runtime code loading."""

    check_id = "unsafe_execution"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        findings: list[Finding] = []
        for lineno, line in enumerate(source.code_with_strings.split("\n"), start=1):
            for pattern, needs_concat, message in PATTERNS:
                if not pattern.search(line):
                    continue
                if needs_concat and ".." not in line:
                    continue
                findings.append(make_finding("UNSAFE_EXECUTION", message, line_number=lineno))
        return findings
