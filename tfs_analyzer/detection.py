"""Format and module-type detection.

Both detectors walk ordered rule tables and stop at the first row that
matches. New module kinds or dialect signals are added by appending rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from re import Pattern, compile

from tfs_analyzer.lua_text import mask_source
from tfs_analyzer.models import FormatKind, ModuleKind

logger = logging.getLogger(__name__)

MODULE_CONSTRUCTORS = (
    "Action",
    "MoveEvent",
    "CreatureEvent",
    "TalkAction",
    "GlobalEvent",
    "Spell",
    "Weapon",
)

_BOTH = frozenset({FormatKind.XML, FormatKind.REVSCRIPT})
_XML_ONLY = frozenset({FormatKind.XML})
_REVSCRIPT_ONLY = frozenset({FormatKind.REVSCRIPT})


@dataclass(frozen=True, slots=True)
class FormatRule:
    """Any pattern matching classifies the content as ``kind``."""

    kind: FormatKind
    patterns: tuple[Pattern[str], ...]
    reason: str


FORMAT_RULES: tuple[FormatRule, ...] = (
    FormatRule(
        kind=FormatKind.XML,
        patterns=(compile(r"<\?xml"), compile(r"</?[A-Za-z_][\w.:-]*>")),
        reason="xml prolog or tag",
    ),
    FormatRule(
        kind=FormatKind.REVSCRIPT,
        patterns=(
            compile(
                r"\blocal\s+[A-Za-z_]\w*\s*=\s*(?:"
                + "|".join(MODULE_CONSTRUCTORS)
                + r")\s*\("
            ),
            compile(r":register\(\)"),
            compile(r":[A-Za-z_]\w*\s*\("),
        ),
        reason="revscript constructor, register call or method call",
    ),
)

DEFAULT_FORMAT = FormatKind.XML


@dataclass(frozen=True, slots=True)
class Signal:
    """All ``patterns`` must match, and only for the listed formats."""

    patterns: tuple[Pattern[str], ...]
    formats: frozenset[FormatKind] = _BOTH
    callbacks: tuple[str, ...] = ()

    def matches(self, content: str, format: FormatKind) -> bool:
        if format not in self.formats:
            return False
        return all(pattern.search(content) for pattern in self.patterns)


@dataclass(frozen=True, slots=True)
class ModuleRule:
    """Module kind recognized when any of its signals matches."""

    kind: ModuleKind
    signals: tuple[Signal, ...]


def _callbacks(*names: str) -> Signal:
    return Signal(patterns=(compile(r"\b(?:" + "|".join(names) + r")\b"),), callbacks=names)


def _constructor(name: str) -> Signal:
    return Signal(patterns=(compile(rf"\b{name}\s*\("),), formats=_REVSCRIPT_ONLY)


def _xml_tags(*tags: str) -> Signal:
    return Signal(patterns=(compile(r"<(?:" + "|".join(tags) + r")\b"),), formats=_XML_ONLY)


MODULE_RULES: tuple[ModuleRule, ...] = (
    ModuleRule(
        kind=ModuleKind.MOVEMENT,
        signals=(
            _callbacks(
                "onStepIn", "onStepOut", "onEquip", "onDeEquip", "onAddItem", "onRemoveItem"
            ),
            _constructor("MoveEvent"),
            _xml_tags("movevent"),
        ),
    ),
    ModuleRule(
        kind=ModuleKind.SPELL,
        signals=(
            _callbacks("onCastSpell"),
            _constructor("Spell"),
            _xml_tags("instant", "rune", "conjure"),
        ),
    ),
    ModuleRule(
        kind=ModuleKind.TALK_ACTION,
        signals=(
            _callbacks("onSay"),
            _constructor("TalkAction"),
            _xml_tags("talkaction"),
        ),
    ),
    ModuleRule(
        kind=ModuleKind.CREATURE_EVENT,
        signals=(
            _callbacks(
                "onLogin",
                "onLogout",
                "onDeath",
                "onPrepareDeath",
                "onKill",
                "onAdvance",
                "onHealthChange",
                "onManaChange",
                "onTextEdit",
                "onModalWindow",
            ),
            _constructor("CreatureEvent"),
            _xml_tags("event"),
        ),
    ),
    ModuleRule(
        kind=ModuleKind.GLOBAL_EVENT,
        signals=(
            Signal(
                patterns=(compile(r"\bonThink\b"), compile(r":interval\s*\(|\binterval\s*=")),
                callbacks=("onThink",),
            ),
            _callbacks("onStartup", "onShutdown", "onRecord", "onTime"),
            _constructor("GlobalEvent"),
            _xml_tags("globalevent"),
        ),
    ),
    ModuleRule(
        kind=ModuleKind.WEAPON,
        signals=(
            _callbacks("onUseWeapon"),
            _constructor("Weapon"),
            _xml_tags("melee", "distance", "wand"),
        ),
    ),
    ModuleRule(
        kind=ModuleKind.ACTION,
        signals=(
            _callbacks("onUse"),
            _constructor("Action"),
            _xml_tags("action"),
        ),
    ),
)


HANDLER_CALLBACKS: frozenset[str] = frozenset(
    name for rule in MODULE_RULES for signal in rule.signals for name in signal.callbacks
)

# The server discards what these return.
VOID_CALLBACKS: frozenset[str] = frozenset({"onDeath", "onKill", "onModalWindow"})


def is_handler_name(name: str) -> bool:
    """Whether ``name`` is an event callback the server invokes."""
    return name in HANDLER_CALLBACKS


def detect_format(content: str) -> FormatKind:
    """Classify ``content`` as legacy XML-style or RevScript."""
    for rule in FORMAT_RULES:
        if any(pattern.search(content) for pattern in rule.patterns):
            logger.debug("format=%s (%s)", rule.kind.value, rule.reason)
            return rule.kind
    logger.debug("format=%s (default)", DEFAULT_FORMAT.value)
    return DEFAULT_FORMAT


def detect_module_type(content: str, format: FormatKind) -> ModuleKind:
    """Return the first module kind whose rule matches ``content``."""
    rule = find_module_rule(content, format)
    kind = rule.kind if rule is not None else ModuleKind.UNKNOWN
    logger.debug("module_type=%s", kind.value)
    return kind


def find_module_rule(content: str, format: FormatKind) -> ModuleRule | None:
    """Matching table row; commented-out code never counts as evidence."""
    code = mask_source(content, strings=False)
    for rule in MODULE_RULES:
        if any(signal.matches(code, format) for signal in rule.signals):
            return rule
    return None


def module_rule_for(kind: ModuleKind) -> ModuleRule | None:
    """Table row for ``kind``, ``None`` for ``UNKNOWN``."""
    for rule in MODULE_RULES:
        if rule.kind is kind:
            return rule
    return None
