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
Maps a (command, optional service) pair onto the pipeline stages and owns
the process exit code.
"""
import logging
import time
from enum import Enum
from typing import Callable, Dict, Mapping, Optional

from ..BUILDERS.image_builder import ImageBuilder
from ..MANAGERS.environment_manager import EnvironmentValidator
from ..MANAGERS.health_monitor import HealthMonitor, Probe
from ..MANAGERS.log_aggregator import LogAggregator
from ..MANAGERS.prerequisite_checker import PrerequisiteChecker
from ..MANAGERS.service_orchestrator import ServiceOrchestrator
from ..MANAGERS.status_reporter import StatusReporter
from ..MODELS.deployment_state import all_healthy
from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceSet
from ..RUNNERS.compose_platform import ContainerPlatform
from ..UTILS.console import Console
from ..exceptions import (
    DeployctlError,
    HealthTimeoutError,
    UnknownCommand,
    UnknownService,
)

logger = logging.getLogger(__name__)


class Command(str, Enum):
    """
    Every command the CLI accepts.
    """
    DEPLOY = "deploy"
    BUILD = "build"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    STATUS = "status"
    LOGS = "logs"
    HEALTH = "health"
    CLEAN = "clean"
    HELP = "help"

    @classmethod
    def parse(cls, name: Optional[str]) -> "Command":
        """
        Resolves a command name; no name means deploy.

        :raises UnknownCommand: If the name is not a command.
        """
        if not name:
            return cls.DEPLOY
        if name in ("-h", "--help"):
            return cls.HELP
        try:
            return cls(name)
        except ValueError:
            raise UnknownCommand(name) from None


COMMAND_HELP = {
    Command.DEPLOY: "Full deployment (build, start, wait for health)",
    Command.BUILD: "Build all services or a specific service",
    Command.START: "Start all services or a specific service",
    Command.STOP: "Stop all services or a specific service",
    Command.RESTART: "Restart all services or a specific service",
    Command.STATUS: "Show application status",
    Command.LOGS: "Follow application logs",
    Command.HEALTH: "Check application health once",
    Command.CLEAN: "Clean up (stop and remove containers/volumes)",
    Command.HELP: "Show this help message",
}


class Dispatcher:
    """
    Runs one command against a scope and returns the exit code.
    """

    def __init__(
        self,
        config: OrchestrationConfig,
        platform: ContainerPlatform,
        base_dir: str = ".",
        console: Optional[Console] = None,
        probe: Optional[Probe] = None,
        sleep: Callable[[float], None] = time.sleep,
        environ: Optional[Mapping[str, str]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        """
        Wires every pipeline stage to the same platform and console.

        :param config: The orchestration configuration.
        :param platform: The container platform to drive.
        :param base_dir: Project directory holding the env file.
        :param console: Operator output.
        :param probe: Readiness probe override.
        :param sleep: Sleep used between health attempts.
        :param environ: Process environment override.
        :param confirm: Yes/no prompt used before destructive actions.
        """
        self.config = config
        self.platform = platform
        self.console = console or Console(config.app_name)
        self.confirm = confirm or self.console.confirm

        self.checker = PrerequisiteChecker(platform)
        self.validator = EnvironmentValidator(config.environment, base_dir=base_dir, environ=environ)
        self.builder = ImageBuilder(config, platform, self.console)
        self.orchestrator = ServiceOrchestrator(config, platform, self.console)
        self.health = HealthMonitor(config, probe=probe, sleep=sleep, console=self.console)
        self.status = StatusReporter(config, platform, self.console)
        self.logs = LogAggregator(platform, self.console)

        self.handlers: Dict[Command, Callable[[ServiceSet], int]] = {
            Command.DEPLOY: self._deploy,
            Command.BUILD: self._build,
            Command.START: self._start,
            Command.STOP: self._stop,
            Command.RESTART: self._restart,
            Command.STATUS: self._status,
            Command.LOGS: self._logs,
            Command.HEALTH: self._health,
            Command.CLEAN: self._clean,
            Command.HELP: self._help,
        }
        unhandled = set(Command) - set(self.handlers)
        if unhandled:
            raise RuntimeError(f"No handler for: {', '.join(sorted(c.value for c in unhandled))}")

    def dispatch(self, command: Optional[str], service: Optional[str] = None) -> int:
        """
        Runs a command.

        :param command: Command name; None means deploy.
        :param service: Optional service name narrowing the scope.
        :return: Process exit code.
        """
        try:
            cmd = Command.parse(command)
            scope = self.config.resolve_scope(None if cmd is Command.HELP else service)
            logger.debug("Dispatching %s for %s", cmd.value, scope.describe())
            return self.handlers[cmd](scope)
        except UnknownCommand as e:
            self.console.error(e.message)
            self.print_usage()
            return 1
        except UnknownService as e:
            self.console.error(e.message)
            self.console.info(e.hint)
            return 1
        except DeployctlError as e:
            self._report_failure(e)
            return 1

    def _report_failure(self, error: DeployctlError):
        self.console.error(f"{error.stage.capitalize()} failed: {error.message}")
        if error.hint:
            self.console.info(error.hint)

    def _await_health(self, scope: ServiceSet) -> int:
        """
        Waits for the scope, then prints status whatever the outcome.
        A single targeted service is checked strictly.
        """
        try:
            verdicts = self.health.wait_healthy(scope, strict=not scope.is_all)
        except HealthTimeoutError as e:
            self._report_failure(e)
            self.status.show(scope)
            return 1

        healthy = all_healthy(verdicts)
        if not healthy:
            self.console.error("Some services are not healthy")
        self.status.show(scope)
        return 0 if healthy else 1

    def _deploy(self, scope: ServiceSet) -> int:
        self.console.header()
        self.checker.check()
        self.validator.validate()
        self.builder.build(scope)
        self.orchestrator.deploy(scope)
        return self._await_health(scope)

    def _build(self, scope: ServiceSet) -> int:
        self.console.header()
        self.checker.check()
        self.builder.build(scope)
        return 0

    def _start(self, scope: ServiceSet) -> int:
        self.console.header()
        self.checker.check()
        self.validator.validate()
        self.orchestrator.deploy(scope)
        return self._await_health(scope)

    def _stop(self, scope: ServiceSet) -> int:
        self.orchestrator.stop(scope)
        return 0

    def _restart(self, scope: ServiceSet) -> int:
        self.orchestrator.restart(scope)
        return self._await_health(scope)

    def _status(self, scope: ServiceSet) -> int:
        self.status.show(scope)
        return 0

    def _logs(self, scope: ServiceSet) -> int:
        return self.logs.tail_logs(scope)

    def _health(self, scope: ServiceSet) -> int:
        if all_healthy(self.health.check(scope)):
            self.console.success("All services are healthy")
            return 0
        self.console.error("Some services are not healthy")
        return 1

    def _clean(self, scope: ServiceSet) -> int:
        self.console.warning("This will stop all services and remove all data!")
        if not self.confirm("Are you sure?"):
            self.console.info("Cleanup cancelled")
            return 0
        self.orchestrator.clean()
        return 0

    def _help(self, scope: ServiceSet) -> int:
        self.print_usage()
        return 0

    def print_usage(self):
        console = self.console
        console.line("Usage: deployctl [OPTIONS] [COMMAND] [SERVICE]")
        console.line()
        console.line("Commands:")
        for command in Command:
            console.line(f"  {command.value:11} - {COMMAND_HELP[command]}")
        console.line()
        console.line("Services:")
        for service in self.config.services.values():
            console.line(f"  {service.name:11} - {service.description}")
        console.line()
        console.line("Options:")
        console.line("  -c, --config PATH   Configuration file (default: deployctl.yml)")
        console.line("  --project-dir PATH  Directory holding the compose and env files")
        console.line("  --debug             Verbose logging")
        console.line()
        console.line("Examples:")
        console.line("  deployctl deploy           # Full deployment of all services")
        console.line("  deployctl build backend    # Build only the backend service")
        console.line("  deployctl start frontend   # Start only the frontend service")
        console.line("  deployctl logs backend     # View backend logs")
        console.line("  deployctl status           # Check status of all services")
