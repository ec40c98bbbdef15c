"""Lua source text helpers shared by the extractor and the checks."""

from __future__ import annotations

from re import DOTALL, Match, compile

_LEXEME_RE = compile(
    r"(?P<long_comment>--\[(?P<lc_eq>=*)\[.*?\](?P=lc_eq)\])"
    r"|(?P<line_comment>--[^\n]*)"
    r"|(?P<long_string>\[(?P<ls_eq>=*)\[.*?\](?P=ls_eq)\])"
    r'|(?P<dq_string>"(?:\\.|[^"\\\n])*")'
    r"|(?P<sq_string>'(?:\\.|[^'\\\n])*')",
    DOTALL,
)


def mask_source(content: str, *, strings: bool = True) -> str:
    """Blank out comments (and optionally string bodies) keeping offsets intact.

    Every masked character becomes a space except newlines, so line numbers and
    match offsets computed on the masked text are valid for the original.
    String delimiters are kept so ``x = "..."`` still reads as an assignment.
    """

    def replace(match: Match[str]) -> str:
        kind = match.lastgroup
        text = match.group(0)
        if kind in {"long_comment", "line_comment"}:
            return _blank(text)
        if not strings:
            return text
        if kind == "long_string":
            open_len = 2 + len(match.group("ls_eq"))
            return text[:open_len] + _blank(text[open_len:-open_len]) + text[-open_len:]
        return text[0] + _blank(text[1:-1]) + text[-1]

    return _LEXEME_RE.sub(replace, content)


def line_number(content: str, offset: int) -> int:
    """Return the 1-based line containing ``offset``."""
    return content.count("\n", 0, offset) + 1


def _blank(text: str) -> str:
    return "".join("\n" if char == "\n" else " " for char in text)
