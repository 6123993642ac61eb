from __future__ import annotations

from dataclasses import dataclass, replace

RECORD_TYPE = "A"
DEFAULT_TTL = 300


def normalize_domain(name: str) -> str:
    return name.strip().rstrip(".").lower()


def join_domain(*parts: str) -> str:
    """Join labels into a lower-cased domain name."""
    return ".".join(normalize_domain(p) for p in parts)


def ownership_suffix(environment_name: str, root_domain: str) -> str:
    """Suffix shared by every domain name this system owns."""
    return "." + join_domain(environment_name, root_domain)


@dataclass(frozen=True)
class DnsRecord:
    domain_name: str
    values: tuple[str, ...]
    record_type: str = RECORD_TYPE
    ttl: int = DEFAULT_TTL

    @property
    def value_set(self) -> frozenset[str]:
        return frozenset(self.values)

    def __str__(self) -> str:
        return f"{self.domain_name} {self.record_type} [{', '.join(self.values)}]"


@dataclass(frozen=True)
class ServiceInstance:
    service_name: str
    stack_name: str
    host_id: str
    name: str = ""


class RecordSet(dict):
    """Records keyed by lower-cased domain name, one entry per name."""

    def put(self, record: DnsRecord) -> None:
        self[normalize_domain(record.domain_name)] = record

    def merge(self, record: DnsRecord) -> DnsRecord:
        """Append the record's values onto the record already stored under its name."""
        key = normalize_domain(record.domain_name)
        existing = self.get(key)
        if existing is not None:
            record = replace(existing, values=existing.values + record.values)
        self[key] = record
        return record

    def domain_names(self) -> set[str]:
        return set(self.keys())

    def sorted_records(self) -> list[DnsRecord]:
        return [self[k] for k in sorted(self)]
