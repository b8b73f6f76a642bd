import pytest

from dotfiles_installer.lib.settings import (
    CommandEntry,
    Policy,
    SettingEntry,
    apply_commands,
    apply_settings,
    defaults_argv,
    needs_sudo,
)


def test_quit_menu_item_write_invoked_once_with_exact_args(fake_cmd, home):
    entry = SettingEntry(domain="com.apple.finder", key="QuitMenuItem", value=True, policy=Policy.APPLY)

    report = apply_settings([entry], home=home)

    assert fake_cmd.calls == [["defaults", "write", "com.apple.finder", "QuitMenuItem", "-bool", "true"]]
    assert report.applied == ["com.apple.finder QuitMenuItem"]
    assert report.skipped == []


@pytest.mark.parametrize(
    "policy",
    [Policy.SKIP_DEPRECATED, Policy.SKIP_BLOCKED, Policy.SKIP_INSECURE],
)
def test_skipped_entries_never_write(fake_cmd, home, policy):
    entry = SettingEntry(domain="com.apple.dock", key="dashboard-in-overlay", value=True, policy=policy)

    report = apply_settings([entry], home=home)

    assert fake_cmd.calls == []
    assert [label for label, _ in report.skipped] == ["com.apple.dock dashboard-in-overlay"]
    assert report.applied == []


def test_rejected_write_does_not_stop_later_entries(fake_cmd, home):
    entries = [
        SettingEntry("com.apple.dock", "tilesize", 36),
        SettingEntry("com.apple.dock", "autohide", True),
        SettingEntry("com.apple.dock", "mineffect", "scale"),
    ]
    fake_cmd.fail("defaults", "write", "com.apple.dock", "autohide")

    report = apply_settings(entries, home=home)

    assert len(fake_cmd.calls) == 3
    assert report.failed == ["com.apple.dock autohide"]
    assert report.applied == ["com.apple.dock tilesize", "com.apple.dock mineffect"]


def test_insecure_entry_applies_when_reenabled(fake_cmd, home):
    entry = SettingEntry("com.apple.LaunchServices", "LSQuarantine", False, policy=Policy.SKIP_INSECURE)

    report = apply_settings([entry], home=home, reenabled={"com.apple.LaunchServices LSQuarantine"})

    assert fake_cmd.calls == [["defaults", "write", "com.apple.LaunchServices", "LSQuarantine", "-bool", "false"]]
    assert report.applied == ["com.apple.LaunchServices LSQuarantine"]


def test_reenable_does_not_cover_other_skip_policies(fake_cmd, home):
    entry = SettingEntry("NSGlobalDomain", "AppleFontSmoothing", 1, policy=Policy.SKIP_DEPRECATED)
    apply_settings([entry], home=home, reenabled={"NSGlobalDomain AppleFontSmoothing"})
    assert fake_cmd.calls == []


@pytest.mark.parametrize(
    "value,value_type,expected",
    [
        (36, None, ["-int", "36"]),
        (0.001, None, ["-float", "0.001"]),
        (0, "float", ["-float", "0"]),
        ("Always", None, ["-string", "Always"]),
        (False, None, ["-bool", "false"]),
        ([4], None, ["-array", "4"]),
        (["a", "b"], None, ["-array", "a", "b"]),
    ],
)
def test_value_rendering(home, value, value_type, expected):
    entry = SettingEntry("NSGlobalDomain", "K", value, value_type=value_type)
    assert defaults_argv(entry, home=home)[-len(expected):] == expected


def test_sudo_and_current_host_flags(home):
    entry = SettingEntry("NSGlobalDomain", "com.apple.mouse.tapBehavior", 1, sudo=True, current_host=True)
    assert defaults_argv(entry, home=home) == [
        "sudo",
        "defaults",
        "-currentHost",
        "write",
        "NSGlobalDomain",
        "com.apple.mouse.tapBehavior",
        "-int",
        "1",
    ]


def test_home_is_expanded(home):
    entry = SettingEntry("com.apple.screencapture", "location", "${HOME}/Desktop")
    assert defaults_argv(entry, home=home)[-1] == f"{home}/Desktop"


def test_unknown_type_is_rejected(home):
    with pytest.raises(ValueError):
        defaults_argv(SettingEntry("d", "k", 1, value_type="date"), home=home)


def test_commands_follow_policy_and_continue(fake_cmd, home):
    commands = [
        CommandEntry("timezone", ("systemsetup", "-settimezone", "Etc/UTC"), sudo=True),
        CommandEntry("notification center", ("launchctl", "unload"), policy=Policy.SKIP_BLOCKED),
        CommandEntry("show library", ("chflags", "nohidden", "${HOME}/Library")),
    ]
    fake_cmd.fail("sudo", "systemsetup")

    report = apply_commands(commands, home=home)

    assert fake_cmd.calls == [
        ["sudo", "systemsetup", "-settimezone", "Etc/UTC"],
        ["chflags", "nohidden", f"{home}/Library"],
    ]
    assert report.failed == ["timezone"]
    assert report.applied == ["show library"]
    assert report.skipped[0][0] == "notification center"


def test_needs_sudo_ignores_skipped_entries():
    skipped = SettingEntry("/.Spotlight-V100/VolumeConfiguration", "Exclusions", ["/Volumes"], policy=Policy.SKIP_BLOCKED, sudo=True)
    assert needs_sudo([skipped], []) is False
    assert needs_sudo([SettingEntry("d", "k", 1, sudo=True)], []) is True
    assert needs_sudo([], [CommandEntry("x", ("pmset",), sudo=True)]) is True
