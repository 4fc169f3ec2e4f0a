"""
Models for defining services, their readiness checks and the scopes
operations apply to.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, Field

class ReadinessCheck(BaseModel):
    """
    HTTP check a service exposes to signal it can accept traffic.
    A response status inside [ok_status_min, ok_status_max] counts as ready.
    """
    url: str
    timeout: float = 5.0
    ok_status_min: int = 200
    ok_status_max: int = 399

    def is_success(self, status: int) -> bool:
        return self.ok_status_min <= status <= self.ok_status_max

class ServiceDefinition(BaseModel):
    """
    A named unit of deployment. Build and run capabilities are provided by
    the container platform, keyed by this name.
    """
    name: str
    description: str = ""
    readiness: ReadinessCheck

    # Externally reachable URLs, label -> url
    endpoints: Dict[str, str] = Field(default_factory=dict)
    log_hint: Optional[str] = None

    @property
    def logs_command(self) -> str:
        """Command an operator runs to inspect this service's logs."""
        return self.log_hint or f"deployctl logs {self.name}"

@dataclass(frozen=True)
class ServiceSet:
    """
    The services an operation targets: all configured services, or one.
    Names keep configuration order.
    """
    names: Tuple[str, ...]
    is_all: bool = True

    @classmethod
    def all_of(cls, names: List[str]) -> "ServiceSet":
        return cls(names=tuple(names), is_all=True)

    @classmethod
    def single(cls, name: str) -> "ServiceSet":
        return cls(names=(name,), is_all=False)

    @property
    def target(self) -> Optional[str]:
        """The single targeted service, or None for the whole application."""
        return None if self.is_all else self.names[0]

    def __contains__(self, name: str) -> bool:
        return name in self.names

    def __iter__(self):
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def describe(self) -> str:
        return "all services" if self.is_all else f"{self.names[0]} service"
