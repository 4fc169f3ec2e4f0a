# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Container platform capability and its Docker Compose implementation.

The orchestrator core only sees `ContainerPlatform`: typed states and
boolean outcomes, never a tool's text output.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .process_runner import ProcessRunner
from ..MODELS.deployment_state import (
    DeploymentState,
    ResourceUsage,
    ServiceRuntime,
    ServiceState,
)
from ..exceptions import PlatformQueryError

logger = logging.getLogger(__name__)

# Passing None for `services` means the whole application.
Services = Optional[List[str]]


class ContainerPlatform(ABC):
    """
    Build/run capability the orchestrator drives.
    """

    @abstractmethod
    def missing_tools(self) -> List[str]:
        """Names of required tools that are not installed."""

    @abstractmethod
    def engine_reachable(self) -> bool:
        """Whether the container engine answers."""

    @abstractmethod
    def build(self, service: str, no_cache: bool = True) -> bool:
        """Builds one service's image."""

    @abstractmethod
    def up(self, services: Services = None) -> bool:
        """Starts services in the background."""

    @abstractmethod
    def stop(self, services: Services = None) -> bool:
        """Stops services; for the whole application, tears it down."""

    @abstractmethod
    def restart(self, services: Services = None) -> bool:
        """Restarts services in place."""

    @abstractmethod
    def query_state(self) -> DeploymentState:
        """
        Fetches the current state of every service.

        :raises PlatformQueryError: If the platform cannot be queried.
        """

    @abstractmethod
    def resource_usage(self, containers: List[str]) -> Dict[str, ResourceUsage]:
        """
        Usage per container name, for running containers only.

        :raises PlatformQueryError: If the platform cannot be queried.
        """

    @abstractmethod
    def logs(self, services: Services = None, follow: bool = True) -> int:
        """Streams logs to the terminal, returns the tool's exit code."""

    @abstractmethod
    def purge(self) -> bool:
        """Removes containers, volumes and dangling platform data."""


class ComposePlatform(ContainerPlatform):
    """
    Drives `docker compose` (or the legacy `docker-compose` binary).
    """

    def __init__(
        self,
        compose_file: str = "docker-compose.yml",
        project_name: Optional[str] = None,
        runner: Optional[ProcessRunner] = None,
    ):
        """
        Initializes the platform.

        :param compose_file: Compose file path, relative to the runner's working directory.
        :param project_name: Optional compose project name.
        :param runner: Runner used for every tool invocation.
        """
        self.compose_file = compose_file
        self.project_name = project_name
        self.runner = runner or ProcessRunner()
        self._compose: Optional[List[str]] = None

    def _compose_command(self) -> Optional[List[str]]:
        """
        Detects the compose front-end once: the docker plugin first, then
        the standalone binary.
        """
        if self._compose is None:
            if self.runner.which("docker") and self.runner.run(["docker", "compose", "version"]).ok:
                self._compose = ["docker", "compose"]
            elif self.runner.which("docker-compose"):
                self._compose = ["docker-compose"]
            else:
                return None
            logger.debug("Using compose command: %s", " ".join(self._compose))
        return self._compose

    def _compose_args(self, *args: str) -> List[str]:
        command = list(self._compose_command() or ["docker", "compose"])
        command += ["-f", self.compose_file]
        if self.project_name:
            command += ["-p", self.project_name]
        command += list(args)
        return command

    def missing_tools(self) -> List[str]:
        missing = []
        if not self.runner.which("docker"):
            missing.append("Docker")
        if self._compose_command() is None:
            missing.append("Docker Compose")
        return missing

    def engine_reachable(self) -> bool:
        return self.runner.run(["docker", "info"]).ok

    def build(self, service: str, no_cache: bool = True) -> bool:
        args = ["build"]
        if no_cache:
            args.append("--no-cache")
        args.append(service)
        # Build output is long; show it only when debugging
        capture = not logger.isEnabledFor(logging.DEBUG)
        return self.runner.run(self._compose_args(*args), capture=capture).ok

    def up(self, services: Services = None) -> bool:
        return self.runner.run(self._compose_args("up", "-d", *(services or []))).ok

    def stop(self, services: Services = None) -> bool:
        if services is None:
            return self.runner.run(self._compose_args("down")).ok
        return self.runner.run(self._compose_args("stop", *services)).ok

    def restart(self, services: Services = None) -> bool:
        return self.runner.run(self._compose_args("restart", *(services or []))).ok

    def query_state(self) -> DeploymentState:
        result = self.runner.run(self._compose_args("ps", "--all", "--format", "json"))
        if result.ok:
            return DeploymentState(self._parse_ps_json(result.stdout))

        # docker-compose v1 has no JSON output; ask for running services instead
        result = self.runner.run(self._compose_args("ps", "--services", "--filter", "status=running"))
        if not result.ok:
            raise PlatformQueryError(
                f"Unable to query service state: {result.stderr.strip() or 'exit code ' + str(result.returncode)}"
            )
        running = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return DeploymentState({name: ServiceRuntime(state=ServiceState.RUNNING) for name in running})

    @staticmethod
    def _parse_ps_json(output: str) -> Dict[str, ServiceRuntime]:
        """
        Parses `compose ps --format json`, which is either one JSON array
        or one JSON object per line depending on the compose version.
        """
        output = output.strip()
        if not output:
            return {}
        try:
            if output.startswith("["):
                entries = json.loads(output)
            else:
                entries = [json.loads(line) for line in output.splitlines() if line.strip()]
        except json.JSONDecodeError as e:
            raise PlatformQueryError(f"Unexpected compose ps output: {e}") from e

        services: Dict[str, ServiceRuntime] = {}
        for entry in entries:
            name = entry.get("Service")
            if not name:
                continue
            state = ServiceState.RUNNING if entry.get("State") == "running" else ServiceState.STOPPED
            runtime = ServiceRuntime(state=state, container=entry.get("Name"), detail=entry.get("Status", ""))
            # Any running replica makes the service running
            if name not in services or state == ServiceState.RUNNING:
                services[name] = runtime
        return services

    def resource_usage(self, containers: List[str]) -> Dict[str, ResourceUsage]:
        if not containers:
            return {}
        result = self.runner.run(["docker", "stats", "--no-stream", "--format", "{{json .}}", *containers])
        if not result.ok:
            raise PlatformQueryError(f"Unable to query resource usage: {result.stderr.strip()}")

        usage: Dict[str, ResourceUsage] = {}
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Skipping unparseable stats line: %s", line)
                continue
            usage[entry.get("Name", "")] = ResourceUsage(
                cpu=entry.get("CPUPerc", ""),
                memory=entry.get("MemUsage", ""),
                net_io=entry.get("NetIO", ""),
                block_io=entry.get("BlockIO", ""),
            )
        return usage

    def logs(self, services: Services = None, follow: bool = True) -> int:
        args = ["logs"]
        if follow:
            args.append("-f")
        return self.runner.stream(self._compose_args(*args, *(services or [])))

    def purge(self) -> bool:
        if not self.runner.run(self._compose_args("down", "-v")).ok:
            return False
        return self.runner.run(["docker", "system", "prune", "-f"]).ok
