"""Handler registration check."""

from __future__ import annotations

from re import compile, escape

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.detection import MODULE_CONSTRUCTORS, is_handler_name
from tfs_analyzer.extractor import extract_functions
from tfs_analyzer.models import Finding, FormatKind

XML_REGISTRATION_RE = compile(
    r"<(?:action|movevent|talkaction|event|globalevent|instant|rune|conjure|melee|distance|wand)\b"
)

# local action = Action()
EVENT_BINDING_RE = compile(
    r"\b(?P<owner>[A-Za-z_]\w*)\s*=\s*(?:" + "|".join(MODULE_CONSTRUCTORS) + r")\s*\("
)


class RegistrationCheck:
    """Detects handlers that are defined but never registered."""

    check_id = "registration"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        handlers = [
            function
            for function in extract_functions(source.content, source.format)
            if is_handler_name(function.name)
        ]
        if not handlers:
            return []

        if source.format is FormatKind.XML:
            if XML_REGISTRATION_RE.search(source.code):
                return []
            first = handlers[0]
            return [
                make_finding(
                    "MISSING_REGISTRATION",
                    f"`{first.name}` has no XML registration entry.",
                    line_number=first.line_number,
                )
            ]

        event_objects = {match.group("owner") for match in EVENT_BINDING_RE.finditer(source.code)}
        findings: list[Finding] = []
        checked: set[str] = set()
        for handler in handlers:
            owner = handler.owner
            if owner is None or owner not in event_objects or owner in checked:
                continue
            checked.add(owner)
            register_re = compile(rf"\b{escape(owner)}\s*:\s*register\s*\(")
            if register_re.search(source.code):
                continue
            findings.append(
                make_finding(
                    "MISSING_REGISTRATION",
                    f"`{owner}` defines `{handler.name}` but never calls `{owner}:register()`.",
                    line_number=handler.line_number,
                )
            )
        return findings
