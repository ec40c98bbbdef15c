"""Tests for the individual checks and the check registry."""

from __future__ import annotations

import pytest

from tfs_analyzer.checks import build_checks, default_checks, list_check_info, scan
from tfs_analyzer.checks.base import ScriptSource
from tfs_analyzer.checks.debug_output import DebugOutputCheck
from tfs_analyzer.checks.dialect_mix import DialectMixCheck
from tfs_analyzer.checks.registration import RegistrationCheck
from tfs_analyzer.checks.return_value import ReturnValueCheck
from tfs_analyzer.checks.security_leakage import SecurityLeakageCheck
from tfs_analyzer.checks.table_syntax import TableSyntaxCheck
from tfs_analyzer.checks.unsafe_execution import UnsafeExecutionCheck
from tfs_analyzer.checks.version_compat import VersionCompatCheck, parse_version
from tfs_analyzer.models import FormatKind, ModuleKind, Severity


def test_bare_bracket_table_is_an_error() -> None:
    source = _revscript("local rewards = [2160, 2152]\nlocal ok = {1, 2}")
    findings = TableSyntaxCheck().evaluate(source)
    assert len(findings) == 1
    assert findings[0].code == "BAD_TABLE_SYNTAX"
    assert findings[0].severity is Severity.ERROR
    assert findings[0].line_number == 1


def test_indexing_long_strings_and_keyed_tables_are_fine() -> None:
    content = "\n".join(
        [
            "local t = {[1] = 'a', [2] = 'b'}",
            "local s = [[long string]]",
            "local q = [==[other]==]",
            "t[1] = t[2]",
            "if t[1] == t[2] then end",
            "local msg = \"x = [not a table]\"",
        ]
    )
    assert TableSyntaxCheck().evaluate(_revscript(content)) == []


def test_unbalanced_braces_are_reported() -> None:
    findings = TableSyntaxCheck().evaluate(_revscript("local t = {1, 2"))
    assert len(findings) == 1
    assert findings[0].line_number is None
    assert "Unbalanced" in findings[0].message


def test_revscript_handler_without_register_call() -> None:
    content = "local action = Action()\nfunction action.onUse(player, item)\n  return true\nend"
    findings = RegistrationCheck().evaluate(_revscript(content, ModuleKind.ACTION))
    assert len(findings) == 1
    assert findings[0].code == "MISSING_REGISTRATION"
    assert findings[0].severity is Severity.WARNING
    assert findings[0].line_number == 2


def test_registration_is_checked_per_handler_table() -> None:
    content = "\n".join(
        [
            "local login = CreatureEvent('Login')",
            "function login.onLogin(player)",
            "  return true",
            "end",
            "login:register()",
            "local logout = CreatureEvent('Logout')",
            "function logout.onLogout(player)",
            "  return true",
            "end",
        ]
    )
    findings = RegistrationCheck().evaluate(_revscript(content, ModuleKind.CREATURE_EVENT))
    assert [finding.line_number for finding in findings] == [7]
    assert "logout" in findings[0].message


def test_commented_register_call_does_not_count() -> None:
    content = "local a = Action()\nfunction a.onUse(player)\n  return true\nend\n-- a:register()"
    assert len(RegistrationCheck().evaluate(_revscript(content, ModuleKind.ACTION))) == 1


def test_xml_registration_satisfies_legacy_handlers() -> None:
    with_xml = (
        '<action itemid="2050" script="potion.lua"/>\nfunction onUse(cid)\n  return true\nend'
    )
    without_xml = "function onUse(cid)\n  return true\nend"
    check = RegistrationCheck()
    assert check.evaluate(_xml(with_xml, ModuleKind.ACTION)) == []
    findings = check.evaluate(_xml(without_xml, ModuleKind.ACTION))
    assert len(findings) == 1
    assert findings[0].code == "MISSING_REGISTRATION"


def test_no_handlers_means_nothing_to_register() -> None:
    assert RegistrationCheck().evaluate(_revscript("local x = 1")) == []


def test_class_extensions_are_not_handler_tables() -> None:
    content = "\n".join(
        [
            "local action = Action()",
            "function Player.isVip(self)",
            "  return self:getStorageValue(1000) > 0",
            "end",
            "function action.onUse(player, item)",
            "  return true",
            "end",
            "action:register()",
        ]
    )
    assert RegistrationCheck().evaluate(_revscript(content, ModuleKind.ACTION)) == []


def test_helper_only_lib_file_needs_no_registration() -> None:
    content = "local function helper(x)\n  return x\nend\nfunction getReward(level)\nend"
    assert RegistrationCheck().evaluate(_xml(content)) == []


def test_legacy_helpers_do_not_hide_handler_line() -> None:
    content = "local function helper(x)\n  return x\nend\nfunction onSay(cid, words)\nend"
    findings = RegistrationCheck().evaluate(_xml(content, ModuleKind.TALK_ACTION))
    assert len(findings) == 1
    assert findings[0].line_number == 4
    assert "onSay" in findings[0].message


def test_missing_return_in_handler() -> None:
    content = (
        "local talk = TalkAction('!x')\n"
        "function talk.onSay(player, words)\n  player:say(words)\nend"
    )
    findings = ReturnValueCheck().evaluate(_revscript(content, ModuleKind.TALK_ACTION))
    assert len(findings) == 1
    assert findings[0].code == "MISSING_RETURN"
    assert findings[0].line_number == 2


def test_return_value_present_or_module_unknown() -> None:
    with_return = "function onSay(cid, words)\n  return false\nend"
    bare_return = "function onSay(cid, words)\n  return\nend"
    check = ReturnValueCheck()
    assert check.evaluate(_xml(with_return, ModuleKind.TALK_ACTION)) == []
    assert len(check.evaluate(_xml(bare_return, ModuleKind.TALK_ACTION))) == 1
    assert check.evaluate(_xml(bare_return, ModuleKind.UNKNOWN)) == []


def test_callbacks_with_ignored_results_need_no_return() -> None:
    content = "\n".join(
        [
            "local death = CreatureEvent('PlayerDeath')",
            "function death.onDeath(player, corpse, killer)",
            "  player:say('bye')",
            "end",
            "death:register()",
        ]
    )
    check = ReturnValueCheck()
    assert check.evaluate(_revscript(content, ModuleKind.CREATURE_EVENT)) == []
    login = content.replace("onDeath(player, corpse, killer)", "onLogin(player)")
    assert len(check.evaluate(_revscript(login, ModuleKind.CREATURE_EVENT))) == 1


def test_security_leakage_flags_credentials_keys_and_sql() -> None:
    content = "\n".join(
        [
            'local dbPassword = "hunter22"',
            'local key = "sk-abcdefghijklmnopqrstuvwxyz123456"',
            'db.query("SELECT * FROM players WHERE name = \'" .. name .. "\'")',
            'db.query("UPDATE players SET level = 1 WHERE name = " .. db.escapeString(name))',
            "-- local password = \"commented\"",
        ]
    )
    findings = SecurityLeakageCheck().evaluate(_revscript(content))
    assert [finding.line_number for finding in findings] == [1, 2, 3]
    assert all(finding.code == "SECURITY_LEAKAGE" for finding in findings)
    assert all(finding.severity is Severity.ERROR for finding in findings)


def test_token_item_names_are_not_credentials() -> None:
    content = "\n".join(
        [
            'local tokenName = "gold token"',
            'local tokenId = "22721"',
            'local authToken = "a1b2c3d4"',
        ]
    )
    findings = SecurityLeakageCheck().evaluate(_revscript(content))
    assert [finding.line_number for finding in findings] == [3]


def test_unsafe_execution_flags_shell_and_loadstring() -> None:
    content = "\n".join(
        [
            'os.execute("rm -rf " .. path)',
            "local f = loadstring(param)",
            'dofile("data/lib/core.lua")',
            'dofile("data/" .. param)',
        ]
    )
    findings = UnsafeExecutionCheck().evaluate(_revscript(content))
    assert [finding.line_number for finding in findings] == [1, 2, 4]
    assert {finding.code for finding in findings} == {"UNSAFE_EXECUTION"}


def test_dialect_mix_only_applies_to_revscript() -> None:
    content = "\n".join(
        [
            "function action.onUse(player, item)",
            "  doPlayerSendTextMessage(player, 22, 'hi')",
            "  doPlayerSendTextMessage(player, 22, 'again')",
            "  doRemoveItem(item.uid, 1)",
            "  player:sendTextMessage(22, 'fine')",
            "  return true",
            "end",
        ]
    )
    findings = DialectMixCheck().evaluate(_revscript(content, ModuleKind.ACTION))
    assert [finding.line_number for finding in findings] == [2, 4]
    assert "player:sendTextMessage()" in findings[0].message
    assert DialectMixCheck().evaluate(_xml(content, ModuleKind.ACTION)) == []


def test_debug_output_is_info() -> None:
    findings = DebugOutputCheck().evaluate(_revscript("print('x')\nlogger.print('y')\nprint ('z')"))
    assert [finding.line_number for finding in findings] == [1, 3]
    assert all(finding.severity is Severity.INFO for finding in findings)


def test_version_compat_for_old_servers() -> None:
    content = "local a = Action()\na:register()"
    check = VersionCompatCheck()
    assert len(check.evaluate(_revscript(content, tfs_version="0.4"))) == 1
    assert check.evaluate(_revscript(content, tfs_version="1.4.2")) == []
    assert check.evaluate(_revscript(content, tfs_version="latest")) == []
    assert check.evaluate(_xml(content, tfs_version="0.4")) == []


def test_parse_version_variants() -> None:
    assert parse_version("1.2") == (1, 2)
    assert parse_version("TFS 0.4") == (0, 4)
    assert parse_version("v1") == (1, 0)
    assert parse_version(None) is None
    assert parse_version("master") is None


def test_build_checks_filters_and_validates() -> None:
    assert [check.check_id for check in default_checks()] == [
        item.check_id for item in list_check_info()
    ]
    selected = build_checks(
        enabled_check_ids=["dialect_mix", "table_syntax"],
        disabled_check_ids=["dialect_mix"],
    )
    assert [check.check_id for check in selected] == ["table_syntax"]

    without_debug = build_checks(disabled_check_ids=["debug_output"])
    assert "debug_output" not in {check.check_id for check in without_debug}

    with pytest.raises(ValueError, match="Unknown check ids: nope"):
        build_checks(enabled_check_ids=["nope"])


def test_list_check_info_exposes_codes() -> None:
    info = {item.check_id: item for item in list_check_info()}
    assert info["security_leakage"].codes == ("SECURITY_LEAKAGE",)
    assert info["security_leakage"].name == "SecurityLeakageCheck"
    assert info["security_leakage"].description
    assert all(item.default_enabled for item in info.values())


def test_scan_runs_every_check_without_short_circuit() -> None:
    content = "local t = [1]\nlocal password = 'abcdef'\nprint(t)"
    findings = scan(content, FormatKind.XML, ModuleKind.UNKNOWN)
    assert [finding.code for finding in findings] == [
        "BAD_TABLE_SYNTAX",
        "SECURITY_LEAKAGE",
        "DEBUG_PRINT",
    ]


def test_scan_accepts_explicit_checks() -> None:
    content = "local t = [1]\nprint(t)"
    findings = scan(content, FormatKind.XML, ModuleKind.UNKNOWN, checks=[DebugOutputCheck()])
    assert [finding.code for finding in findings] == ["DEBUG_PRINT"]


def _revscript(
    content: str,
    module_type: ModuleKind = ModuleKind.UNKNOWN,
    *,
    tfs_version: str | None = None,
) -> ScriptSource:
    return ScriptSource(
        content=content,
        format=FormatKind.REVSCRIPT,
        module_type=module_type,
        tfs_version=tfs_version,
    )


def _xml(
    content: str,
    module_type: ModuleKind = ModuleKind.UNKNOWN,
    *,
    tfs_version: str | None = None,
) -> ScriptSource:
    return ScriptSource(
        content=content,
        format=FormatKind.XML,
        module_type=module_type,
        tfs_version=tfs_version,
    )
