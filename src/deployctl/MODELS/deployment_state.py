"""
Snapshots of what the container platform reports, and health verdicts.

None of these are persisted: they are fetched fresh for every query.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ServiceState(str, Enum):
    """Lifecycle state of a service as reported by the platform."""

    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


@dataclass
class ServiceRuntime:
    """Platform view of one service."""

    state: ServiceState = ServiceState.STOPPED
    container: Optional[str] = None
    detail: str = ""


@dataclass
class DeploymentState:
    """
    Point-in-time view of every service the platform knows about.
    Services the platform does not report are considered stopped.
    """

    services: Dict[str, ServiceRuntime] = field(default_factory=dict)

    @classmethod
    def unknown(cls, names: List[str]) -> "DeploymentState":
        return cls({name: ServiceRuntime(state=ServiceState.UNKNOWN) for name in names})

    def runtime_of(self, name: str) -> ServiceRuntime:
        return self.services.get(name, ServiceRuntime())

    def state_of(self, name: str) -> ServiceState:
        return self.runtime_of(name).state

    def running(self, names: Optional[List[str]] = None) -> List[str]:
        """Names of running services, optionally restricted to `names`."""
        candidates = names if names is not None else list(self.services)
        return [n for n in candidates if self.state_of(n) == ServiceState.RUNNING]


@dataclass
class ResourceUsage:
    """Best-effort resource usage of a running container."""

    cpu: str = ""
    memory: str = ""
    net_io: str = ""
    block_io: str = ""


@dataclass
class ServiceStatus:
    name: str
    state: ServiceState
    usage: Optional[ResourceUsage] = None
    endpoints: Dict[str, str] = field(default_factory=dict)
    container: Optional[str] = None
    logs_command: Optional[str] = None


@dataclass
class StatusSnapshot:
    """What the status command shows."""

    services: List[ServiceStatus] = field(default_factory=list)
    data_paths: List[str] = field(default_factory=list)

    def get(self, name: str) -> Optional[ServiceStatus]:
        for status in self.services:
            if status.name == name:
                return status
        return None


@dataclass
class HealthVerdict:
    """Outcome of probing one service."""

    service_name: str
    healthy: bool
    attempts_used: int = 0


def all_healthy(verdicts: List[HealthVerdict]) -> bool:
    """Aggregate verdict: healthy only if every verdict is healthy."""
    return all(v.healthy for v in verdicts)
