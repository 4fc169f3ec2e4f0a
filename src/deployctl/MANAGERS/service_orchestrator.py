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
Deployment control: moving services to a new running state, stopping,
restarting and purging them.
"""
import logging
from typing import List, Optional

from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceSet
from ..RUNNERS.compose_platform import ContainerPlatform
from ..UTILS.console import Console
from ..exceptions import DeployFailed, PlatformQueryError

logger = logging.getLogger(__name__)

class ServiceOrchestrator:
    """
    Transitions the services in a scope to their desired state.

    The runtime does not reload configuration in place, so a deploy always
    stops the whole scope before starting it again.
    """
    def __init__(self, config: OrchestrationConfig, platform: ContainerPlatform,
                 console: Optional[Console] = None):
        """
        Initializes the orchestrator.

        :param config: Configuration for all services.
        :param platform: Platform that runs the services.
        :param console: Where progress is reported.
        """
        self.config = config
        self.platform = platform
        self.console = console or Console(config.app_name)

    @staticmethod
    def _targets(scope: ServiceSet) -> Optional[List[str]]:
        return None if scope.is_all else list(scope)

    def deploy(self, scope: ServiceSet):
        """
        Stops the scope if anything in it is running, then starts it.

        :param scope: Services to deploy.
        :raises DeployFailed: If the start step fails.
        """
        self.console.info(f"Deploying {scope.describe()}...")

        try:
            state = self.platform.query_state()
            running = state.running(list(scope))
        except PlatformQueryError as e:
            # Stopping is idempotent, so an unknown state is treated as running
            logger.warning("Could not query service state (%s), stopping %s anyway", e, scope.describe())
            running = list(scope)

        if running:
            self.console.info("Stopping existing containers...")
            if not self.platform.stop(self._targets(scope)):
                logger.warning("Stopping %s reported a failure, starting anyway", scope.describe())

        if not self.platform.up(self._targets(scope)):
            raise DeployFailed(scope)
        self.console.success(f"{scope.describe().capitalize()} deployed successfully")

    def stop(self, scope: ServiceSet) -> bool:
        """
        Stops the scope. The whole application is torn down, a single
        service is only stopped.

        :param scope: Services to stop.
        :return: Whether the platform reported success.
        """
        self.console.info(f"Stopping {scope.describe()}...")
        if self.platform.stop(self._targets(scope)):
            self.console.success(f"{scope.describe().capitalize()} stopped")
            return True
        self.console.warning(f"Stopping {scope.describe()} reported a failure")
        return False

    def restart(self, scope: ServiceSet):
        """
        Restarts the scope in place.

        :param scope: Services to restart.
        :raises DeployFailed: If the restart fails.
        """
        self.console.info(f"Restarting {scope.describe()}...")
        if not self.platform.restart(self._targets(scope)):
            raise DeployFailed(scope, action="restart")

    def clean(self):
        """
        Removes all containers and volumes and prunes platform data.

        :raises DeployFailed: If the purge fails.
        """
        if not self.platform.purge():
            raise DeployFailed(self.config.service_names, action="clean up")
        self.console.success("Cleanup completed")
