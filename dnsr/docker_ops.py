from __future__ import annotations

from typing import Any

import docker
from docker.errors import DockerException

from .errors import DiscoveryReadError, HostResolutionError
from .records import ServiceInstance

SERVICE_LABEL = "dnsr.service"
STACK_LABEL = "dnsr.stack"
HOST_LABEL = "dnsr.host"
COMPOSE_PROJECT_LABEL = "com.docker.compose.project"


def _client() -> docker.DockerClient:
    return docker.from_env()


class DockerDiscovery:
    """Discovers service instances from labelled containers on a Docker daemon.

    Containers opt in with `dnsr.service=<name>` and optionally set
    `dnsr.stack` (falling back to the compose project) and `dnsr.host`.
    Hosts resolve through a static host -> ip map.
    """

    def __init__(
        self,
        host_ips: dict[str, str],
        default_host: str = "local",
        default_stack: str = "default",
        client: Any = None,
    ):
        self.host_ips = dict(host_ips)
        self.default_host = default_host
        self.default_stack = default_stack
        self._docker = client

    def client(self) -> Any:
        if self._docker is None:
            self._docker = _client()
        return self._docker

    def list_service_instances(self) -> list[ServiceInstance]:
        try:
            containers = self.client().containers.list(filters={"label": [SERVICE_LABEL], "status": "running"})
        except DockerException as e:
            raise DiscoveryReadError(f"Error reading external dns entries: {e}") from e

        out: list[ServiceInstance] = []
        for c in containers:
            labels = c.labels or {}
            out.append(
                ServiceInstance(
                    service_name=labels.get(SERVICE_LABEL, ""),
                    stack_name=labels.get(STACK_LABEL) or labels.get(COMPOSE_PROJECT_LABEL) or self.default_stack,
                    host_id=labels.get(HOST_LABEL, self.default_host),
                    name=c.name,
                )
            )
        return out

    def resolve_host(self, host_id: str) -> str:
        ip = self.host_ips.get(host_id)
        if not ip:
            raise HostResolutionError(host_id, "no address configured (DNSR_DOCKER_HOST_IPS)")
        return ip
