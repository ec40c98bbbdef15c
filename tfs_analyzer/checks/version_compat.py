"""Server-version compatibility check."""

from __future__ import annotations

from re import IGNORECASE, compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.models import Finding, FormatKind

REVSCRIPT_MIN_VERSION = (1, 3)

VERSION_RE = compile(r"^\s*(?:tfs\s*)?v?(?P<major>\d+)(?:\.(?P<minor>\d+))?", IGNORECASE)


class VersionCompatCheck:
    """Notes RevScript syntax targeted at servers older than TFS 1.3."""

    check_id = "version_compat"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        if source.format is not FormatKind.REVSCRIPT:
            return []
        version = parse_version(source.tfs_version)
        if version is None or version >= REVSCRIPT_MIN_VERSION:
            return []
        return [
            make_finding(
                "VERSION_MISMATCH",
                f"RevScript syntax targeted at TFS {source.tfs_version.strip()}.",
            )
        ]


def parse_version(text: str | None) -> tuple[int, int] | None:
    """Parse ``"1.2"``, ``"TFS 0.4"`` or ``"v1"`` into ``(major, minor)``."""
    if not text:
        return None
    match = VERSION_RE.match(text)
    if match is None:
        return None
    return (int(match.group("major")), int(match.group("minor") or 0))
