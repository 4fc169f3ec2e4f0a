"""
Builders that turn service definitions into fresh container images.
"""
import logging
from typing import Optional

from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceSet
from ..RUNNERS.compose_platform import ContainerPlatform
from ..UTILS.console import Console
from ..exceptions import BuildFailed

logger = logging.getLogger(__name__)

class ImageBuilder:
    """
    Runs clean (non-cached) builds for the services in a scope, stopping at
    the first failure.
    """
    def __init__(self, config: OrchestrationConfig, platform: ContainerPlatform,
                 console: Optional[Console] = None):
        """
        Initializes the ImageBuilder.

        :param config: The orchestration configuration.
        :param platform: Platform that performs the builds.
        :param console: Where progress is reported.
        """
        self.config = config
        self.platform = platform
        self.console = console or Console(config.app_name)

    def build(self, scope: ServiceSet):
        """
        Builds every service in scope, in configuration order.

        :param scope: Services to build.
        :raises BuildFailed: Naming the first service whose build failed.
        """
        self.console.info(f"Building {scope.describe()}...")
        for name in scope:
            logger.debug("Building %s without cache", name)
            if not self.platform.build(name, no_cache=True):
                raise BuildFailed(name)
            self.console.success(f"{name} service built successfully")

        if scope.is_all:
            self.console.success("All services built successfully")
