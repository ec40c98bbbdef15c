"""Analysis data model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FormatKind(str, Enum):
    """Script dialect."""

    XML = "xml"
    REVSCRIPT = "revscript"


class ModuleKind(str, Enum):
    """Game-event module a script implements."""

    ACTION = "action"
    MOVEMENT = "movement"
    CREATURE_EVENT = "creatureevent"
    TALK_ACTION = "talkaction"
    GLOBAL_EVENT = "globalevent"
    SPELL = "spell"
    WEAPON = "weapon"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str | None) -> ModuleKind | None:
        """Resolve a user-supplied module hint, or ``None`` when unrecognized."""
        if not text:
            return None
        key = text.strip().lower().replace("_", "").replace("-", "").replace(" ", "")
        for member in cls:
            if key in {member.value, member.name.lower().replace("_", "")}:
                return member
        return _MODULE_ALIASES.get(key)


_MODULE_ALIASES: dict[str, ModuleKind] = {
    "actions": ModuleKind.ACTION,
    "moveevent": ModuleKind.MOVEMENT,
    "movevent": ModuleKind.MOVEMENT,
    "movements": ModuleKind.MOVEMENT,
    "creaturescript": ModuleKind.CREATURE_EVENT,
    "creaturescripts": ModuleKind.CREATURE_EVENT,
    "talkactions": ModuleKind.TALK_ACTION,
    "globalevents": ModuleKind.GLOBAL_EVENT,
    "spells": ModuleKind.SPELL,
    "weapons": ModuleKind.WEAPON,
}


class Severity(str, Enum):
    """Finding severity."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Category(str, Enum):
    """Score category a finding code counts against."""

    QUALITY = "quality"
    PERFORMANCE = "performance"
    SECURITY = "security"


@dataclass(frozen=True, slots=True)
class AnalysisInput:
    """Raw script text plus optional caller hints."""

    content: str
    tfs_version_hint: str | None = None
    module_type_hint: str | None = None


@dataclass(frozen=True, slots=True)
class FunctionSignature:
    """A function definition found in a script."""

    name: str
    parameters: tuple[str, ...] = ()
    line_number: int | None = None
    owner: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "parameters": list(self.parameters),
            "line": self.line_number,
            "owner": self.owner,
        }


@dataclass(frozen=True, slots=True)
class Finding:
    """A single detected issue."""

    severity: Severity
    code: str
    message: str
    line_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "line": self.line_number,
        }


@dataclass(frozen=True, slots=True)
class Recommendation:
    """Remediation advice, usually tied to a finding."""

    message: str
    related_finding: Finding | None = None

    def to_dict(self) -> dict[str, Any]:
        related = self.related_finding
        return {
            "message": self.message,
            "code": related.code if related is not None else None,
            "line": related.line_number if related is not None else None,
        }


@dataclass(frozen=True, slots=True)
class ScoreReport:
    """Category scores in the 0..100 range; higher is better."""

    overall: int = 100
    quality: int = 100
    performance: int = 100
    security: int = 100

    def to_dict(self) -> dict[str, int]:
        return {
            "overall": self.overall,
            "quality": self.quality,
            "performance": self.performance,
            "security": self.security,
        }


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Complete report for one analyzed script."""

    format: FormatKind
    module_type: ModuleKind
    functions: tuple[FunctionSignature, ...]
    findings: tuple[Finding, ...]
    recommendations: tuple[Recommendation, ...]
    scores: ScoreReport

    @property
    def errors(self) -> tuple[Finding, ...]:
        return tuple(item for item in self.findings if item.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[Finding, ...]:
        return tuple(item for item in self.findings if item.severity is Severity.WARNING)

    def to_dict(self) -> dict[str, Any]:
        """Presentation-layer mapping; findings are listed under ``errors``."""
        return {
            "format": self.format.value,
            "moduleType": self.module_type.value,
            "functions": [item.to_dict() for item in self.functions],
            "errors": [item.to_dict() for item in self.findings],
            "recommendations": [item.to_dict() for item in self.recommendations],
            "scores": self.scores.to_dict(),
        }
