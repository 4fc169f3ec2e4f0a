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
Readiness monitoring for services: one-shot probes and bounded,
fixed-interval polling until every service in a scope answers.
"""
import http.client
import logging
import time
from typing import Callable, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_fixed

from ..MODELS.deployment_state import HealthVerdict, all_healthy
from ..MODELS.orchestration_config import HealthPolicy, OrchestrationConfig
from ..MODELS.service_definition import ServiceDefinition, ServiceSet
from ..UTILS.console import Console
from ..exceptions import HealthTimeoutError

logger = logging.getLogger(__name__)

Probe = Callable[[ServiceDefinition], bool]


def http_probe(service: ServiceDefinition) -> bool:
    """
    Calls a service's readiness URL once.

    Args:
        service: The service to probe.

    Returns:
        True if the response status satisfies the readiness check.
    """
    check = service.readiness
    try:
        request = Request(check.url, method="GET")
        with urlopen(request, timeout=check.timeout) as response:
            status = response.status
    except HTTPError as e:
        status = e.code
    except (URLError, http.client.HTTPException, OSError, ValueError) as e:
        logger.debug("Readiness probe for %s failed: %s", service.name, e)
        return False

    logger.debug("Readiness probe for %s returned HTTP %s", service.name, status)
    return check.is_success(status)


class HealthMonitor:
    """
    Polls each service's readiness signal with bounded retries and a fixed
    interval, one service at a time in configuration order.
    """

    def __init__(
        self,
        config: OrchestrationConfig,
        probe: Optional[Probe] = None,
        sleep: Callable[[float], None] = time.sleep,
        console: Optional[Console] = None,
    ):
        """
        Initializes the health monitor.

        :param config: Configuration holding the services and default policy.
        :param probe: One-shot readiness check; defaults to an HTTP GET.
        :param sleep: Used between attempts; replaceable for tests.
        :param console: Where progress is reported.
        """
        self.config = config
        self._probe = probe or http_probe
        self.sleep = sleep
        self.console = console or Console(config.app_name)

    def probe(self, service: ServiceDefinition) -> bool:
        return self._probe(service)

    def wait_for(self, service: ServiceDefinition, policy: HealthPolicy) -> HealthVerdict:
        """
        Probes a service until it is ready or the policy's attempts run out.

        Args:
            service: The service to wait for.
            policy: Maximum attempts and the fixed interval between them.

        Returns:
            HealthVerdict with the number of probes made.
        """
        attempts = 0

        def attempt() -> bool:
            nonlocal attempts
            attempts += 1
            return self.probe(service)

        retrying = Retrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_fixed(policy.interval),
            retry=retry_if_result(lambda healthy: not healthy),
            # Out of attempts: report unhealthy instead of raising RetryError
            retry_error_callback=lambda retry_state: False,
            before_sleep=lambda retry_state: self.console.progress(),
            sleep=self.sleep,
        )
        healthy = retrying(attempt)
        if attempts > 1:
            self.console.line()
        logger.debug("%s healthy=%s after %d attempt(s)", service.name, healthy, attempts)
        return HealthVerdict(service_name=service.name, healthy=healthy, attempts_used=attempts)

    def wait_healthy(
        self,
        scope: ServiceSet,
        policy: Optional[HealthPolicy] = None,
        strict: bool = False,
    ) -> List[HealthVerdict]:
        """
        Waits for every service in scope, sequentially. An unhealthy service
        does not stop later services from being checked, so a verdict is
        produced for each one.

        Args:
            scope: Services to wait for.
            policy: Retry policy; defaults to the configured one.
            strict: Raise on the first unhealthy service instead of continuing.

        Returns:
            One verdict per service, in configuration order.

        Raises:
            HealthTimeoutError: In strict mode, for the first unhealthy service.
        """
        policy = policy or self.config.health
        self.console.info("Waiting for services to be healthy...")

        verdicts = []
        for service in self.config.services_in(scope):
            label = service.name.capitalize()
            self.console.info(f"Checking {service.name} health...")
            verdict = self.wait_for(service, policy)
            verdicts.append(verdict)

            if verdict.healthy:
                self.console.success(f"{label} is healthy and ready")
                continue
            if strict:
                raise HealthTimeoutError(service.name, verdict.attempts_used, service.logs_command)
            self.console.error(f"{label} failed to become healthy within expected time")
            self.console.info(f"Check {service.name} logs with: {service.logs_command}")

        if all_healthy(verdicts):
            self.console.success("All services are healthy and ready")
        return verdicts

    def check(self, scope: ServiceSet) -> List[HealthVerdict]:
        """
        Probes every service in scope exactly once, without retrying.
        Does not touch deployment state.
        """
        verdicts = []
        for service in self.config.services_in(scope):
            label = service.name.capitalize()
            healthy = self.probe(service)
            verdicts.append(HealthVerdict(service_name=service.name, healthy=healthy, attempts_used=1))
            if healthy:
                self.console.success(f"{label} is healthy")
            else:
                self.console.error(f"{label} is not healthy")
        return verdicts
