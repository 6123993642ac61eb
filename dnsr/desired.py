from __future__ import annotations

import logging
from typing import Callable, Iterable

from .errors import HostResolutionError
from .records import DEFAULT_TTL, RECORD_TYPE, DnsRecord, RecordSet, ServiceInstance, join_domain

log = logging.getLogger(__name__)


class DesiredStateBuilder:
    """Turns discovered service instances into the record set that should exist.

    Every instance maps to `service.stack.environment.root`. Instances sharing a
    name are merged into one record whose values keep first-seen order.
    """

    def __init__(
        self,
        environment_name: str,
        root_domain: str,
        resolve_host: Callable[[str], str],
        ttl: int = DEFAULT_TTL,
    ):
        self.environment_name = environment_name
        self.root_domain = root_domain
        self.resolve_host = resolve_host
        self.ttl = int(ttl)

    def domain_name(self, instance: ServiceInstance) -> str:
        return join_domain(instance.service_name, instance.stack_name, self.environment_name, self.root_domain)

    def build(self, instances: Iterable[ServiceInstance]) -> RecordSet:
        records = RecordSet()
        for inst in instances:
            if not inst.service_name:
                continue
            if not inst.host_id:
                log.debug("Instance %s has no host id, skipping", inst.name or inst.service_name)
                continue
            try:
                ip = self.resolve_host(inst.host_id)
            except HostResolutionError as e:
                log.info("%s", e)
                continue
            except Exception as e:
                log.info("Failed to resolve host '%s': %s: %s", inst.host_id, type(e).__name__, e)
                continue
            if not ip:
                log.info("Host %s has no address, skipping %s", inst.host_id, inst.name or inst.service_name)
                continue
            records.merge(DnsRecord(self.domain_name(inst), (ip,), RECORD_TYPE, self.ttl))
        return records
