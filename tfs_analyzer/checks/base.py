"""Base check protocol and script source model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from tfs_analyzer.lua_text import mask_source
from tfs_analyzer.models import Finding, FormatKind, ModuleKind


@dataclass(slots=True)
class ScriptSource:
    """Script text with the facts every check may need."""

    content: str
    format: FormatKind
    module_type: ModuleKind
    tfs_version: str | None = None
    code: str = field(init=False)
    code_with_strings: str = field(init=False)

    def __post_init__(self) -> None:
        self.code = mask_source(self.content)
        self.code_with_strings = mask_source(self.content, strings=False)


class Check(Protocol):
    """Protocol for independent, deterministic script checks."""

    check_id: str

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        """Inspect ``source`` and return findings."""
