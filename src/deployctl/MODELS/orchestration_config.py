"""
Models for overall orchestration configuration.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator
from enum import Enum
from .service_definition import ServiceDefinition, ServiceSet
from ..exceptions import UnknownService

class SettingKind(str, Enum):
    """
    Kinds of optional application settings the environment validator checks.
    """
    BOOL = "bool"
    INT = "int"
    PATH = "path"

class EnvironmentSpec(BaseModel):
    """
    Where the application's environment file lives and what it must contain.
    """
    file: str = ".env"
    template: str = ".env.production.example"
    required_keys: List[str] = ["GROQ_API_KEY", "OPENAI_API_KEY"]
    placeholders: List[str] = ["your_groq_api_key_here", "your_openai_api_key_here"]
    typed_keys: Dict[str, SettingKind] = {}

class HealthPolicy(BaseModel):
    """
    Bounded, fixed-interval retry policy for readiness polling.
    """
    max_attempts: int = Field(default=30, ge=1)
    interval: float = Field(default=2.0, ge=0)

class OrchestrationConfig(BaseModel):
    """
    Complete configuration for the managed application.
    Services are kept in the order they are checked and reported.
    """
    app_name: str = "Application"
    compose_file: str = "docker-compose.yml"
    project_name: Optional[str] = None
    services: Dict[str, ServiceDefinition]
    environment: EnvironmentSpec = Field(default_factory=EnvironmentSpec)
    health: HealthPolicy = Field(default_factory=HealthPolicy)

    # Platform-owned data, shown in status output only
    data_paths: List[str] = []

    @field_validator("services")
    @classmethod
    def _require_services(cls, value: Dict[str, ServiceDefinition]) -> Dict[str, ServiceDefinition]:
        if not value:
            raise ValueError("at least one service must be configured")
        return value

    @property
    def service_names(self) -> List[str]:
        return list(self.services.keys())

    def resolve_scope(self, service: Optional[str] = None) -> ServiceSet:
        """
        Resolves the optional service argument into a scope.

        :param service: A configured service name, or None/empty for all services.
        :return: The resolved scope.
        :raises UnknownService: If the name is not configured.
        """
        if not service:
            return ServiceSet.all_of(self.service_names)
        if service not in self.services:
            raise UnknownService(service, self.service_names)
        return ServiceSet.single(service)

    def services_in(self, scope: ServiceSet) -> List[ServiceDefinition]:
        return [self.services[name] for name in scope]
