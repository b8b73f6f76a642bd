from dotfiles_installer.lib.post_actions import (
    RESTART_APPS,
    BestEffortAction,
    launch_services_rebuild_action,
    restart_actions,
    run_best_effort,
)


def test_missing_process_is_swallowed(fake_cmd):
    fake_cmd.fail("killall", "Safari", returncode=1)

    done = run_best_effort(restart_actions())

    assert [c[1] for c in fake_cmd.calls] == list(RESTART_APPS)
    assert "restart Safari" not in done
    assert "restart Dock" in done


def test_exceptions_from_runner_do_not_propagate(monkeypatch):
    from dotfiles_installer.lib import post_actions

    def boom(argv, **kw):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(post_actions, "run_cmd", boom)
    assert run_best_effort([BestEffortAction("x", ("nope",))]) == []


def test_lsregister_skipped_when_missing(fake_cmd, tmp_path):
    action = launch_services_rebuild_action(str(tmp_path / "lsregister"))
    assert run_best_effort([action]) == []
    assert fake_cmd.calls == []


def test_lsregister_runs_when_present(fake_cmd, tmp_path):
    tool = tmp_path / "lsregister"
    tool.write_text("", encoding="utf-8")

    run_best_effort([launch_services_rebuild_action(str(tool))])

    assert fake_cmd.calls == [
        [str(tool), "-kill", "-r", "-domain", "local", "-domain", "system", "-domain", "user"]
    ]
