"""
Checks that the container platform is installed and its engine is running.
"""
import logging

from ..RUNNERS.compose_platform import ContainerPlatform
from ..exceptions import EngineUnreachable, ToolNotInstalled

logger = logging.getLogger(__name__)


class PrerequisiteChecker:
    """
    First pipeline stage. Never retried.
    """

    def __init__(self, platform: ContainerPlatform):
        self.platform = platform

    def check(self):
        """
        :raises ToolNotInstalled: For the first missing tool.
        :raises EngineUnreachable: If the engine does not answer.
        """
        missing = self.platform.missing_tools()
        if missing:
            raise ToolNotInstalled(missing[0])
        if not self.platform.engine_reachable():
            raise EngineUnreachable()
        logger.debug("Prerequisites satisfied")
