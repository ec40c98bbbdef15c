"""Function signature extraction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from re import MULTILINE, Match, compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.detection import detect_format
from tfs_analyzer.lua_text import line_number, mask_source
from tfs_analyzer.models import Finding, FormatKind, FunctionSignature

logger = logging.getLogger(__name__)

_IDENT = r"[A-Za-z_]\w*"
# Parameter text may wrap lines but never runs into a body.
_PARAMS = r"(?:(?!\bend\b|\bfunction\b)[^()])*"

# function action.onUse(player, item, ...)
HANDLER_RE = compile(
    rf"^[ \t]*function[ \t]+(?P<owner>{_IDENT})\.(?P<name>{_IDENT})[ \t]*\((?P<params>{_PARAMS})\)",
    MULTILINE,
)

# function onUse(cid, item, ...)
FREE_FUNCTION_RE = compile(
    rf"^[ \t]*(?:local[ \t]+)?function[ \t]+(?P<name>{_IDENT})[ \t]*\((?P<params>{_PARAMS})\)",
    MULTILINE,
)

# Any line that starts a named function definition.
FUNCTION_START_RE = compile(
    r"^[ \t]*(?:local[ \t]+)?(?P<keyword>function)\b(?![ \t]*\()", MULTILINE
)

# A complete header: dotted/colon name followed by a closed parameter list.
_WELL_FORMED_RE = compile(rf"function[ \t]+{_IDENT}(?:[.:]{_IDENT})*[ \t]*\({_PARAMS}\)")


@dataclass(slots=True)
class Extraction:
    """Functions found in a script plus problems met while reading headers."""

    functions: list[FunctionSignature] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)


def extract(content: str, format: FormatKind | None = None) -> Extraction:
    """Extract handler signatures in order of appearance.

    RevScript scripts define handlers on their event object
    (``function action.onUse(...)``); legacy scripts define free functions
    (``function onUse(...)``). Headers that cannot be read are reported as
    ``MALFORMED_SIGNATURE`` warnings and skipped.
    """
    effective_format = format if format is not None else detect_format(content)
    code = mask_source(content)
    pattern = HANDLER_RE if effective_format is FormatKind.REVSCRIPT else FREE_FUNCTION_RE

    result = Extraction()
    for match in pattern.finditer(code):
        result.functions.append(_to_signature(match, code))

    for match in FUNCTION_START_RE.finditer(code):
        if _WELL_FORMED_RE.match(code, match.start("keyword")):
            continue
        lineno = line_number(code, match.start())
        header = content.split("\n")[lineno - 1].strip()
        result.findings.append(
            make_finding(
                "MALFORMED_SIGNATURE",
                f"Unreadable function header: `{_clip(header)}`.",
                line_number=lineno,
            )
        )

    logger.debug(
        "extracted %d function(s), %d malformed header(s)",
        len(result.functions),
        len(result.findings),
    )
    return result


def extract_functions(content: str, format: FormatKind | None = None) -> list[FunctionSignature]:
    """Return only the signatures from :func:`extract`."""
    return extract(content, format).functions


def split_parameters(raw: str) -> tuple[str, ...]:
    stripped = raw.strip()
    if not stripped:
        return ()
    return tuple(item.strip() for item in stripped.split(",") if item.strip())


def _to_signature(match: Match[str], code: str) -> FunctionSignature:
    groups = match.groupdict()
    return FunctionSignature(
        name=groups["name"],
        parameters=split_parameters(groups["params"]),
        line_number=line_number(code, match.start("name")),
        owner=groups.get("owner"),
    )


def _clip(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
