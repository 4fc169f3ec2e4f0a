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
Parsers for the orchestrator's YAML configuration file.
"""
import logging
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError as ModelValidationError

from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceDefinition
from ..UTILS.string_interpolation import EnvironmentInterpolator
from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = """
app_name: "Leonardo's RFQ Alchemy"
compose_file: docker-compose.yml

environment:
  file: .env
  template: .env.production.example
  required_keys:
    - GROQ_API_KEY
    - OPENAI_API_KEY
  placeholders:
    - your_groq_api_key_here
    - your_openai_api_key_here
  typed_keys:
    DEBUG: bool
    MAX_FILE_SIZE: int
    UPLOAD_DIRECTORY: path
    CHROMA_PERSIST_DIRECTORY: path

health:
  max_attempts: 30
  interval: 2

services:
  backend:
    description: Backend API service
    readiness: http://localhost:${BACKEND_PORT:-8000}/docs
    endpoints:
      Backend API: http://localhost:${BACKEND_PORT:-8000}
      API Documentation: http://localhost:${BACKEND_PORT:-8000}/docs
  frontend:
    description: Frontend web application
    readiness: http://localhost:${FRONTEND_PORT:-5173}
    endpoints:
      Frontend: http://localhost:${FRONTEND_PORT:-5173}

data_paths:
  - data/uploads
  - data/chroma_proposal_db
"""

class ConfigParser:
    """
    Parser for deployctl.yml files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: A dictionary of environment variables for interpolation.
        """
        self.context = context if context is not None else dict(os.environ)

    def load(self, config_path: Optional[str] = None) -> OrchestrationConfig:
        """
        Loads the configuration file, falling back to the built-in default
        when no path is given or the file does not exist.

        :param config_path: Path to the configuration file.
        :return: Parsed configuration.
        """
        if config_path and os.path.exists(config_path):
            logger.debug("Loading configuration from %s", config_path)
            return self.parse(config_path)
        if config_path:
            logger.debug("%s not found, using built-in configuration", config_path)
        return self.parse_from_string(DEFAULT_CONFIG)

    def parse(self, config_path: str) -> OrchestrationConfig:
        """
        Parses a configuration file from a path.

        :param config_path: Path to the configuration file.
        :return: Parsed configuration.
        """
        with open(config_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content, source=config_path)

    def parse_from_string(self, content: str, source: str = "<default>") -> OrchestrationConfig:
        """
        Parses a configuration from a string.

        :param content: YAML content of the configuration.
        :param source: Name used in error messages.
        :return: Parsed configuration.
        :raises ConfigError: If the YAML or its structure is invalid.
        """
        interpolator = EnvironmentInterpolator(self.context)
        content = interpolator.interpolate(content)
        for name in interpolator.missing:
            logger.warning("Variable %s is not set, defaulting to an empty string", name)

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {source}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{source} must contain a mapping at the top level")

        services = {}
        for name, spec in (data.get('services') or {}).items():
            services[name] = self._parse_service(name, spec or {})
        data['services'] = services

        try:
            return OrchestrationConfig(**data)
        except ModelValidationError as e:
            raise ConfigError(f"Invalid configuration in {source}: {e}") from e

    def _parse_service(self, name: str, spec: Dict[str, Any]) -> ServiceDefinition:
        """
        Normalizes a single service entry. `readiness` may be a bare URL
        or a mapping with url/timeout/status bounds.

        :param name: The name of the service.
        :param spec: The service specification dictionary.
        :return: A ServiceDefinition instance.
        """
        readiness = spec.get('readiness')
        if isinstance(readiness, str):
            readiness = {'url': readiness}

        service = dict(spec)
        service['name'] = name
        service['readiness'] = readiness

        try:
            return ServiceDefinition(**service)
        except ModelValidationError as e:
            raise ConfigError(f"Invalid definition for service '{name}': {e}") from e
