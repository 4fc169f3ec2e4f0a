"""
Status reporting: container state, resource usage and access information.
"""
import logging
from typing import Optional

from ..MODELS.deployment_state import (
    DeploymentState,
    ServiceState,
    ServiceStatus,
    StatusSnapshot,
)
from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceSet
from ..RUNNERS.compose_platform import ContainerPlatform
from ..UTILS.console import Console
from ..exceptions import PlatformQueryError

logger = logging.getLogger(__name__)


class StatusReporter:
    """
    Builds and prints a StatusSnapshot. Reporting never fails: platform
    errors degrade to an unknown state or missing usage.
    """

    def __init__(self, config: OrchestrationConfig, platform: ContainerPlatform,
                 console: Optional[Console] = None):
        self.config = config
        self.platform = platform
        self.console = console or Console(config.app_name)

    def report(self, scope: ServiceSet) -> StatusSnapshot:
        """
        Queries the platform for every service in scope.

        :param scope: Services to report on.
        :return: A fresh snapshot.
        """
        try:
            state = self.platform.query_state()
        except PlatformQueryError as e:
            logger.warning("Service state unavailable: %s", e)
            state = DeploymentState.unknown(list(scope))

        containers = [
            state.runtime_of(name).container
            for name in scope
            if state.state_of(name) == ServiceState.RUNNING and state.runtime_of(name).container
        ]
        try:
            usage = self.platform.resource_usage(containers)
        except PlatformQueryError as e:
            logger.warning("Resource usage unavailable: %s", e)
            usage = {}

        snapshot = StatusSnapshot(data_paths=list(self.config.data_paths))
        for service in self.config.services_in(scope):
            runtime = state.runtime_of(service.name)
            snapshot.services.append(ServiceStatus(
                name=service.name,
                state=runtime.state,
                usage=usage.get(runtime.container) if runtime.container else None,
                endpoints=dict(service.endpoints),
                container=runtime.container,
                logs_command=service.logs_command,
            ))
        return snapshot

    def render(self, snapshot: StatusSnapshot):
        """Prints the snapshot."""
        console = self.console
        console.info("Application Status:")
        console.line()
        console.line(f"{'SERVICE':15} {'STATUS':10} CONTAINER")
        console.line("-" * 44)
        for status in snapshot.services:
            console.line(f"{status.name:15} {status.state.value:10} {status.container or '-'}")
        console.line()

        console.info("Resource Usage:")
        usages = [s for s in snapshot.services if s.usage]
        if not usages:
            console.warning("No containers running")
        for status in usages:
            console.line(f"  {status.name:15} CPU {status.usage.cpu:8} MEM {status.usage.memory}")
        console.line()

        console.info("Access Information:")
        for status in snapshot.services:
            for label, url in status.endpoints.items():
                console.line(f"  {label}: {url}")
        console.line()

        if snapshot.data_paths:
            console.info("Data:")
            for path in snapshot.data_paths:
                console.line(f"  {path}")
            console.line()

        console.info("View logs with:")
        for status in snapshot.services:
            command = status.logs_command or f"deployctl logs {status.name}"
            console.line(f"  {command:25} # {status.name.capitalize()} logs")
        console.line(f"  {'deployctl logs':25} # All logs")

    def show(self, scope: ServiceSet) -> StatusSnapshot:
        snapshot = self.report(scope)
        self.render(snapshot)
        return snapshot
