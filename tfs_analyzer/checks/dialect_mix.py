"""Legacy/RevScript dialect mixing check."""

from __future__ import annotations

from re import compile

from tfs_analyzer.catalog import make_finding
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.lua_text import line_number
from tfs_analyzer.models import Finding, FormatKind

LEGACY_REPLACEMENTS: dict[str, str] = {
    "doPlayerSendTextMessage": "player:sendTextMessage()",
    "doPlayerSendCancel": "player:sendCancelMessage()",
    "doCreatureSay": "creature:say()",
    "getPlayerStorageValue": "player:getStorageValue()",
    "setPlayerStorageValue": "player:setStorageValue()",
    "doPlayerAddItem": "player:addItem()",
    "doPlayerRemoveItem": "player:removeItem()",
    "doRemoveItem": "item:remove()",
    "doTransformItem": "item:transform()",
    "doTeleportThing": "creature:teleportTo()",
    "doSendMagicEffect": "position:sendMagicEffect()",
    "getCreaturePosition": "creature:getPosition()",
    "getThingPos": "thing:getPosition()",
    "getPlayerLevel": "player:getLevel()",
    "getPlayerName": "player:getName()",
    "doPlayerAddExp": "player:addExperience()",
    "doPlayerRemoveMoney": "player:removeMoney()",
    "doCreatureAddHealth": "creature:addHealth()",
}

LEGACY_CALL_RE = compile(r"(?<![.:\w])(" + "|".join(LEGACY_REPLACEMENTS) + r")\s*\(")


class DialectMixCheck:
    """Detects legacy global functions inside RevScript scripts."""

    check_id = "dialect_mix"

    def evaluate(self, source: ScriptSource) -> list[Finding]:
        if source.format is not FormatKind.REVSCRIPT:
            return []

        findings: list[Finding] = []
        seen: set[str] = set()
        for match in LEGACY_CALL_RE.finditer(source.code):
            name = match.group(1)
            if name in seen:
                continue
            seen.add(name)
            findings.append(
                make_finding(
                    "DIALECT_MIX",
                    f"Legacy `{name}()` used; prefer `{LEGACY_REPLACEMENTS[name]}`.",
                    line_number=line_number(source.code, match.start(1)),
                )
            )
        return findings
