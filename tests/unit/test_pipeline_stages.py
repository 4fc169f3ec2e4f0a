"""
Unit tests for the prerequisite, build and deployment stages.
"""
import pytest
from deployctl.BUILDERS.image_builder import ImageBuilder
from deployctl.MANAGERS.prerequisite_checker import PrerequisiteChecker
from deployctl.MANAGERS.service_orchestrator import ServiceOrchestrator
from deployctl.exceptions import BuildFailed, DeployFailed, EngineUnreachable, ToolNotInstalled


class TestPrerequisiteChecker:

    def test_all_present(self, platform):
        PrerequisiteChecker(platform).check()

    def test_tool_missing(self, platform):
        platform.missing = ["Docker Compose"]
        with pytest.raises(ToolNotInstalled) as exc:
            PrerequisiteChecker(platform).check()
        assert exc.value.tool == "Docker Compose"

    def test_engine_unreachable(self, platform):
        platform.engine_ok = False
        with pytest.raises(EngineUnreachable):
            PrerequisiteChecker(platform).check()


class TestImageBuilder:

    def test_build_all_in_order_without_cache(self, config, platform, console):
        ImageBuilder(config, platform, console).build(config.resolve_scope())
        assert platform.calls == [("build", "backend", True), ("build", "frontend", True)]

    def test_build_single_service_only(self, config, platform, console):
        ImageBuilder(config, platform, console).build(config.resolve_scope("backend"))
        assert platform.calls == [("build", "backend", True)]

    def test_fail_fast(self, config, platform, console):
        platform.failing_builds = {"backend"}
        with pytest.raises(BuildFailed) as exc:
            ImageBuilder(config, platform, console).build(config.resolve_scope())
        assert exc.value.service == "backend"
        assert ("build", "frontend", True) not in platform.calls


class TestServiceOrchestrator:

    def test_deploy_stops_running_scope_before_start(self, config, platform, console):
        platform.set_running("frontend")
        ServiceOrchestrator(config, platform, console).deploy(config.resolve_scope())

        mutating = platform.mutating_calls()
        assert mutating == [("stop", None), ("up", None)]

    def test_deploy_without_running_services_only_starts(self, config, platform, console):
        ServiceOrchestrator(config, platform, console).deploy(config.resolve_scope())
        assert platform.mutating_calls() == [("up", None)]

    def test_deploy_single_service(self, config, platform, console):
        platform.set_running("backend", "frontend")
        ServiceOrchestrator(config, platform, console).deploy(config.resolve_scope("backend"))
        assert platform.mutating_calls() == [("stop", ["backend"]), ("up", ["backend"])]

    def test_deploy_ignores_running_services_outside_scope(self, config, platform, console):
        platform.set_running("frontend")
        ServiceOrchestrator(config, platform, console).deploy(config.resolve_scope("backend"))
        assert platform.mutating_calls() == [("up", ["backend"])]

    def test_failed_stop_does_not_abort_start(self, config, platform, console):
        platform.set_running("backend")
        platform.stop_ok = False
        ServiceOrchestrator(config, platform, console).deploy(config.resolve_scope())
        assert platform.mutating_calls() == [("stop", None), ("up", None)]

    def test_failed_start_raises(self, config, platform, console):
        platform.up_ok = False
        with pytest.raises(DeployFailed) as exc:
            ServiceOrchestrator(config, platform, console).deploy(config.resolve_scope())
        assert exc.value.services == ["backend", "frontend"]

    def test_unknown_state_stops_first(self, config, platform, console):
        platform.state_error = "daemon hiccup"
        ServiceOrchestrator(config, platform, console).deploy(config.resolve_scope())
        assert platform.mutating_calls() == [("stop", None), ("up", None)]

    def test_stop(self, config, platform, console):
        orchestrator = ServiceOrchestrator(config, platform, console)
        assert orchestrator.stop(config.resolve_scope("frontend")) is True
        assert orchestrator.stop(config.resolve_scope()) is True
        assert platform.mutating_calls() == [("stop", ["frontend"]), ("stop", None)]

    def test_restart_failure(self, config, platform, console):
        platform.restart_ok = False
        with pytest.raises(DeployFailed):
            ServiceOrchestrator(config, platform, console).restart(config.resolve_scope())

    def test_clean(self, config, platform, console):
        ServiceOrchestrator(config, platform, console).clean()
        assert platform.mutating_calls() == [("purge",)]
