from __future__ import annotations

from threading import Lock
from typing import Any, Protocol

import httpx

from .errors import DiscoveryReadError, HostResolutionError
from .records import ServiceInstance


class Discovery(Protocol):
    def list_service_instances(self) -> list[ServiceInstance]: ...

    def resolve_host(self, host_id: str) -> str: ...


class MetadataDiscovery:
    """Reads containers and hosts from a Rancher-style metadata service.

    Hosts are fetched together with the container listing so a whole pass
    resolves against the same snapshot.
    """

    def __init__(self, base_url: str, timeout_s: float = 10.0, transport: httpx.BaseTransport | None = None):
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json"},
            timeout=timeout_s,
            follow_redirects=False,
            transport=transport,
        )
        self._lock = Lock()
        self._hosts: dict[str, dict[str, Any]] = {}

    def close(self) -> None:
        self.client.close()

    def _get_list(self, path: str) -> list[dict[str, Any]]:
        resp = self.client.get(path)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, list):
            raise ValueError(f"expected a list from {path}, got {type(data).__name__}")
        return [d for d in data if isinstance(d, dict)]

    def list_service_instances(self) -> list[ServiceInstance]:
        try:
            containers = self._get_list("/containers")
            hosts = self._get_list("/hosts")
        except (httpx.HTTPError, ValueError) as e:
            raise DiscoveryReadError(f"Error reading external dns entries: {e}") from e

        with self._lock:
            self._hosts = {str(h.get("uuid")): h for h in hosts if h.get("uuid")}

        return [
            ServiceInstance(
                service_name=str(c.get("service_name") or ""),
                stack_name=str(c.get("stack_name") or ""),
                host_id=str(c.get("host_uuid") or ""),
                name=str(c.get("name") or ""),
            )
            for c in containers
        ]

    def resolve_host(self, host_id: str) -> str:
        with self._lock:
            host = self._hosts.get(host_id)
        if host is None:
            raise HostResolutionError(host_id, "unknown host")
        ip = str(host.get("agent_ip") or "")
        if not ip:
            raise HostResolutionError(host_id, "host has no agent_ip")
        return ip
