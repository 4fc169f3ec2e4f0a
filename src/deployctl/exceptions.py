"""
Error taxonomy for the orchestrator.

Every fatal condition carries the pipeline stage it was raised from and a
remediation hint, so the dispatcher can print one distinguishing message.
"""
from typing import Iterable, Optional


class DeployctlError(Exception):
    """Base class for all orchestrator errors."""

    stage = "orchestrator"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class ConfigError(DeployctlError):
    """The orchestrator's own configuration file is unusable."""

    stage = "configuration"


class PrereqError(DeployctlError):
    """The container platform is missing or unreachable."""

    stage = "prerequisites"


class ToolNotInstalled(PrereqError):
    def __init__(self, tool: str):
        super().__init__(
            f"{tool} is not installed.",
            hint=f"Please install {tool} first.",
        )
        self.tool = tool


class EngineUnreachable(PrereqError):
    def __init__(self, engine: str = "Docker daemon"):
        super().__init__(
            f"{engine} is not running.",
            hint="Please start Docker first.",
        )
        self.engine = engine


class ValidationError(DeployctlError):
    """Environment configuration is missing or still holds placeholders."""

    stage = "environment"


class MissingConfigFile(ValidationError):
    def __init__(self, path: str, created_from: Optional[str] = None):
        if created_from:
            message = f"Environment file {path} not found, created it from {created_from}."
        else:
            message = f"Environment file {path} not found."
        super().__init__(
            message,
            hint=f"Please edit {path} with your actual API keys before continuing.",
        )
        self.path = path
        self.created_from = created_from


class MissingKey(ValidationError):
    def __init__(self, key: str, path: str = ".env"):
        super().__init__(
            f"Required variable {key} not found in {path}.",
            hint=f"Please ensure {key} is set.",
        )
        self.key = key


class PlaceholderValue(ValidationError):
    def __init__(self, key: str, path: str = ".env"):
        super().__init__(
            f"{key} in {path} still holds a placeholder value.",
            hint=f"Please replace the placeholder for {key} in {path} with an actual value.",
        )
        self.key = key


class InvalidValue(ValidationError):
    def __init__(self, key: str, kind: str, value: str):
        super().__init__(
            f"{key}={value!r} is not a valid {kind}.",
            hint=f"Please set {key} to a valid {kind} value.",
        )
        self.key = key
        self.kind = kind


class BuildError(DeployctlError):
    stage = "build"


class BuildFailed(BuildError):
    def __init__(self, service: str):
        super().__init__(
            f"Failed to build {service} service.",
            hint=f"Re-run the build with --debug to see the output for {service}.",
        )
        self.service = service


class DeployError(DeployctlError):
    stage = "deploy"


class DeployFailed(DeployError):
    def __init__(self, services: Iterable[str], action: str = "deploy"):
        self.services = list(services)
        super().__init__(
            f"Failed to {action} services: {', '.join(self.services)}.",
            hint="Check logs with: deployctl logs",
        )
        self.action = action


class HealthTimeoutError(DeployctlError):
    """A service did not become ready within the bounded poll."""

    stage = "health"

    def __init__(self, service: str, attempts: int, logs_command: Optional[str] = None):
        super().__init__(
            f"{service.capitalize()} failed to become healthy within expected time "
            f"({attempts} attempts).",
            hint=f"Check {service} logs with: {logs_command or 'deployctl logs ' + service}",
        )
        self.service = service
        self.attempts = attempts


class PlatformQueryError(DeployctlError):
    """The container platform could not report its state."""

    stage = "status"


class UnknownCommand(DeployctlError):
    stage = "dispatch"

    def __init__(self, name: str):
        super().__init__(f"Unknown command: {name}")
        self.name = name


class UnknownService(DeployctlError):
    stage = "dispatch"

    def __init__(self, name: str, known: Iterable[str]):
        known = list(known)
        super().__init__(
            f"Unknown service: {name}",
            hint=f"Valid services are: {', '.join(known)}",
        )
        self.name = name
        self.known = known
