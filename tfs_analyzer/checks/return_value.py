"""Handler return-value check."""

from __future__ import annotations

from re import compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.detection import VOID_CALLBACKS, is_handler_name, module_rule_for
from tfs_analyzer.extractor import extract_functions
from tfs_analyzer.models import Finding

VALUED_RETURN_RE = compile(r"\breturn[ \t]+(?!nil\b|end\b)\S")


class ReturnValueCheck:
    """Warns when boolean event handlers never return a value."""

    check_id = "return_value"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        if module_rule_for(source.module_type) is None:
            return []

        handlers = [
            function
            for function in extract_functions(source.content, source.format)
            if is_handler_name(function.name) and function.name not in VOID_CALLBACKS
        ]
        if not handlers or VALUED_RETURN_RE.search(source.code):
            return []

        first = handlers[0]
        return [
            make_finding(
                "MISSING_RETURN",
                f"{source.module_type.value} handler `{first.name}` never returns true/false.",
                line_number=first.line_number,
            )
        ]
