"""
End-to-end command tests against the in-memory platform.
"""
import pytest
from deployctl.CLI.dispatcher import Command, Dispatcher
from deployctl.exceptions import UnknownCommand

VALID_ENV = "GROQ_API_KEY=gsk_real\nOPENAI_API_KEY=sk-real\n"


@pytest.fixture
def project(tmp_path):
    (tmp_path / ".env").write_text(VALID_ENV)
    return tmp_path


def make_dispatcher(config, platform, console, project, healthy=None, confirm=None):
    healthy = healthy if healthy is not None else {"backend": True, "frontend": True}
    config.health.interval = 0
    config.health.max_attempts = 3
    return Dispatcher(
        config,
        platform,
        base_dir=str(project),
        console=console,
        probe=lambda service: healthy[service.name],
        sleep=lambda seconds: None,
        environ={},
        confirm=confirm or (lambda question: False),
    )


def test_command_parse():
    assert Command.parse(None) is Command.DEPLOY
    assert Command.parse("--help") is Command.HELP
    assert Command.parse("status") is Command.STATUS
    with pytest.raises(UnknownCommand) as exc:
        Command.parse("foo")
    assert exc.value.name == "foo"


def test_every_command_has_a_handler(config, platform, console, project):
    dispatcher = make_dispatcher(config, platform, console, project)
    assert set(dispatcher.handlers) == set(Command)


def test_unknown_command(config, platform, console, project, capsys):
    code = make_dispatcher(config, platform, console, project).dispatch("foo")
    captured = capsys.readouterr()
    assert code == 1
    assert "Unknown command: foo" in captured.err
    assert "Usage:" in captured.out
    assert platform.calls == []


def test_unknown_service(config, platform, console, project, capsys):
    code = make_dispatcher(config, platform, console, project).dispatch("build", "database")
    assert code == 1
    assert "Unknown service: database" in capsys.readouterr().err
    assert platform.calls == []


def test_deploy_full_pipeline(config, platform, console, project):
    platform.set_running("backend", "frontend")
    code = make_dispatcher(config, platform, console, project).dispatch("deploy")
    assert code == 0
    assert platform.mutating_calls() == [
        ("build", "backend", True),
        ("build", "frontend", True),
        ("stop", None),
        ("up", None),
    ]


def test_default_command_is_deploy(config, platform, console, project):
    assert make_dispatcher(config, platform, console, project).dispatch(None) == 0
    assert ("up", None) in platform.calls


def test_deploy_single_service(config, platform, console, project):
    code = make_dispatcher(config, platform, console, project).dispatch("deploy", "backend")
    assert code == 0
    assert platform.mutating_calls() == [("build", "backend", True), ("up", ["backend"])]


def test_deploy_stops_at_prerequisites(config, platform, console, project, capsys):
    platform.engine_ok = False
    code = make_dispatcher(config, platform, console, project).dispatch("deploy")
    assert code == 1
    assert platform.mutating_calls() == []
    assert "Prerequisites failed" in capsys.readouterr().err


def test_deploy_stops_at_environment(config, platform, console, tmp_path, capsys):
    code = make_dispatcher(config, platform, console, tmp_path).dispatch("deploy")
    assert code == 1
    assert platform.mutating_calls() == []
    assert (tmp_path / ".env").exists()
    assert "Environment failed" in capsys.readouterr().err


def test_deploy_stops_at_build(config, platform, console, project):
    platform.failing_builds = {"frontend"}
    code = make_dispatcher(config, platform, console, project).dispatch("deploy")
    assert code == 1
    assert not any(call[0] == "up" for call in platform.calls)


def test_deploy_unhealthy_still_reports_status(config, platform, console, project, capsys):
    dispatcher = make_dispatcher(config, platform, console, project, healthy={"backend": True, "frontend": False})
    code = dispatcher.dispatch("deploy")
    out = capsys.readouterr().out
    assert code == 1
    assert "Backend is healthy and ready" in out
    assert "Application Status" in out


def test_start_single_service_times_out_strictly(config, platform, console, project, capsys):
    dispatcher = make_dispatcher(config, platform, console, project, healthy={"backend": False, "frontend": True})
    code = dispatcher.dispatch("start", "backend")
    captured = capsys.readouterr()
    assert code == 1
    assert "Health failed" in captured.err
    assert "deployctl logs backend" in captured.out
    assert "Application Status" in captured.out


def test_start_skips_build(config, platform, console, project):
    assert make_dispatcher(config, platform, console, project).dispatch("start") == 0
    assert not any(call[0] == "build" for call in platform.calls)


def test_build_scoped(config, platform, console, project):
    assert make_dispatcher(config, platform, console, project).dispatch("build", "backend") == 0
    assert platform.mutating_calls() == [("build", "backend", True)]


def test_build_does_not_need_environment(config, platform, console, tmp_path):
    assert make_dispatcher(config, platform, console, tmp_path).dispatch("build") == 0
    assert not (tmp_path / ".env").exists()


def test_stop_always_exits_zero(config, platform, console, project):
    platform.stop_ok = False
    assert make_dispatcher(config, platform, console, project).dispatch("stop", "frontend") == 0
    assert platform.mutating_calls() == [("stop", ["frontend"])]


def test_restart(config, platform, console, project):
    assert make_dispatcher(config, platform, console, project).dispatch("restart", "frontend") == 0
    assert platform.mutating_calls() == [("restart", ["frontend"])]


def test_restart_failure(config, platform, console, project):
    platform.restart_ok = False
    assert make_dispatcher(config, platform, console, project).dispatch("restart") == 1


def test_status(config, platform, console, project, capsys):
    platform.state_error = "daemon down"
    assert make_dispatcher(config, platform, console, project).dispatch("status") == 0
    assert "unknown" in capsys.readouterr().out


def test_logs_passthrough(config, platform, console, project):
    platform.logs_code = 3
    assert make_dispatcher(config, platform, console, project).dispatch("logs", "backend") == 3
    assert platform.calls == [("logs", ["backend"], True)]


@pytest.mark.parametrize("healthy,expected", [
    ({"backend": True, "frontend": True}, 0),
    ({"backend": True, "frontend": False}, 1),
    ({"backend": False, "frontend": True}, 1),
])
def test_health_one_shot(config, platform, console, project, healthy, expected):
    probes = []

    def probe(service):
        probes.append(service.name)
        return healthy[service.name]

    dispatcher = make_dispatcher(config, platform, console, project)
    dispatcher.health._probe = probe
    assert dispatcher.dispatch("health") == expected
    assert probes == ["backend", "frontend"]
    assert platform.mutating_calls() == []


def test_clean_declined(config, platform, console, project, capsys):
    questions = []

    def decline(question):
        questions.append(question)
        return False

    code = make_dispatcher(config, platform, console, project, confirm=decline).dispatch("clean")
    assert code == 0
    assert questions == ["Are you sure?"]
    assert platform.mutating_calls() == []
    assert "Cleanup cancelled" in capsys.readouterr().out


def test_clean_confirmed(config, platform, console, project):
    code = make_dispatcher(config, platform, console, project, confirm=lambda q: True).dispatch("clean")
    assert code == 0
    assert platform.mutating_calls() == [("purge",)]


def test_help(config, platform, console, project, capsys):
    assert make_dispatcher(config, platform, console, project).dispatch("help") == 0
    out = capsys.readouterr().out
    assert "Usage:" in out
    assert "backend" in out and "frontend" in out
