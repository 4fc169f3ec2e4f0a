"""
Shared fixtures: an in-memory container platform and a two-service
configuration, so no test touches Docker or the network.
"""
from typing import Dict, List, Optional

import pytest

from deployctl.MODELS.deployment_state import (
    DeploymentState,
    ResourceUsage,
    ServiceRuntime,
    ServiceState,
)
from deployctl.PARSERS.config_parser import ConfigParser
from deployctl.RUNNERS.compose_platform import ContainerPlatform
from deployctl.UTILS.console import Console
from deployctl.exceptions import PlatformQueryError


class FakePlatform(ContainerPlatform):
    """Records every call; outcomes are set through attributes."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.missing: List[str] = []
        self.engine_ok = True
        self.failing_builds: set = set()
        self.up_ok = True
        self.stop_ok = True
        self.restart_ok = True
        self.purge_ok = True
        self.state_error: Optional[str] = None
        self.usage_error: Optional[str] = None
        self.running: Dict[str, str] = {}
        self.logs_code = 0

    def set_running(self, *names: str):
        self.running = {name: f"app-{name}-1" for name in names}

    def missing_tools(self) -> List[str]:
        return list(self.missing)

    def engine_reachable(self) -> bool:
        return self.engine_ok

    def build(self, service: str, no_cache: bool = True) -> bool:
        self.calls.append(("build", service, no_cache))
        return service not in self.failing_builds

    def up(self, services=None) -> bool:
        self.calls.append(("up", services))
        if self.up_ok:
            for name in services or ["backend", "frontend"]:
                self.running[name] = f"app-{name}-1"
        return self.up_ok

    def stop(self, services=None) -> bool:
        self.calls.append(("stop", services))
        for name in services or list(self.running):
            self.running.pop(name, None)
        return self.stop_ok

    def restart(self, services=None) -> bool:
        self.calls.append(("restart", services))
        return self.restart_ok

    def query_state(self) -> DeploymentState:
        self.calls.append(("query_state",))
        if self.state_error:
            raise PlatformQueryError(self.state_error)
        return DeploymentState({
            name: ServiceRuntime(state=ServiceState.RUNNING, container=container)
            for name, container in self.running.items()
        })

    def resource_usage(self, containers: List[str]) -> Dict[str, ResourceUsage]:
        if self.usage_error:
            raise PlatformQueryError(self.usage_error)
        return {c: ResourceUsage(cpu="1.5%", memory="100MiB / 2GiB") for c in containers}

    def logs(self, services=None, follow: bool = True) -> int:
        self.calls.append(("logs", services, follow))
        return self.logs_code

    def purge(self) -> bool:
        self.calls.append(("purge",))
        return self.purge_ok

    def mutating_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("build", "up", "stop", "restart", "purge")]


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def config():
    return ConfigParser(context={}).load(None)


@pytest.fixture
def console():
    return Console("Test App")
