"""
Log tailing for services, passed straight through from the platform.
"""
from typing import Optional

from ..MODELS.service_definition import ServiceSet
from ..RUNNERS.compose_platform import ContainerPlatform
from ..UTILS.console import Console

class LogAggregator:
    """
    Follows the logs of one or all services until interrupted.
    """
    def __init__(self, platform: ContainerPlatform, console: Optional[Console] = None):
        self.platform = platform
        self.console = console or Console()

    def tail_logs(self, scope: ServiceSet) -> int:
        """
        Streams logs for the scope; blocks until the stream ends.

        :param scope: Services whose logs to follow.
        :return: The platform's exit code.
        """
        self.console.info(f"Tailing logs for: {', '.join(scope)}")
        try:
            return self.platform.logs(None if scope.is_all else list(scope), follow=True)
        except KeyboardInterrupt:
            self.console.line("\nStopping log tailing...")
            return 0
