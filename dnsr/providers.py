from __future__ import annotations

from threading import Lock
from typing import Any, Protocol, runtime_checkable

import httpx

from .errors import ProviderReadError
from .records import DEFAULT_TTL, RECORD_TYPE, DnsRecord, normalize_domain


@runtime_checkable
class Provider(Protocol):
    """DNS provider as seen by the reconciler.

    Mutations are expected to be idempotent. `timeout` is the time left before
    the caller's deadline, or None when there is no deadline.
    """

    def list_records(self) -> list[DnsRecord]: ...

    def add_record(self, record: DnsRecord, timeout: float | None = None) -> None: ...

    def remove_record(self, record: DnsRecord, timeout: float | None = None) -> None: ...

    def update_record(self, record: DnsRecord, timeout: float | None = None) -> None: ...


class InMemoryProvider:
    """Provider backed by a dict. Handy for dry runs and tests."""

    def __init__(self, records: list[DnsRecord] | None = None):
        self.lock = Lock()
        self.records: dict[str, DnsRecord] = {}
        for r in records or []:
            self.records[normalize_domain(r.domain_name)] = r

    def list_records(self) -> list[DnsRecord]:
        with self.lock:
            return list(self.records.values())

    def add_record(self, record: DnsRecord, timeout: float | None = None) -> None:
        with self.lock:
            self.records[normalize_domain(record.domain_name)] = record

    def remove_record(self, record: DnsRecord, timeout: float | None = None) -> None:
        with self.lock:
            self.records.pop(normalize_domain(record.domain_name), None)

    def update_record(self, record: DnsRecord, timeout: float | None = None) -> None:
        with self.lock:
            self.records[normalize_domain(record.domain_name)] = record


def record_to_json(record: DnsRecord) -> dict[str, Any]:
    return {
        "name": record.domain_name,
        "type": record.record_type,
        "ttl": record.ttl,
        "values": list(record.values),
    }


def record_from_json(data: dict[str, Any]) -> DnsRecord:
    return DnsRecord(
        domain_name=normalize_domain(str(data["name"])),
        values=tuple(str(v) for v in data.get("values") or []),
        record_type=str(data.get("type") or RECORD_TYPE),
        ttl=int(data.get("ttl") or DEFAULT_TTL),
    )


class HttpProvider:
    """Generic JSON REST provider.

    GET /records, POST /records, PUT /records/{name}, DELETE /records/{name}.
    Records are `{"name", "type", "ttl", "values"}` objects.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.timeout_s = timeout_s
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_s,
            follow_redirects=False,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def _timeout(self, timeout: float | None) -> float:
        if timeout is None:
            return self.timeout_s
        return max(0.001, min(self.timeout_s, timeout))

    def list_records(self) -> list[DnsRecord]:
        try:
            resp = self.client.get("/records")
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise ProviderReadError(f"Provider error reading dns entries: {e}") from e
        except ValueError as e:
            raise ProviderReadError(f"Provider returned invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise ProviderReadError(f"Provider returned unexpected payload: {data!r}")
        try:
            return [record_from_json(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderReadError(f"Provider returned a malformed record: {e}") from e

    def add_record(self, record: DnsRecord, timeout: float | None = None) -> None:
        self.client.post("/records", json=record_to_json(record), timeout=self._timeout(timeout)).raise_for_status()

    def remove_record(self, record: DnsRecord, timeout: float | None = None) -> None:
        resp = self.client.delete(f"/records/{record.domain_name}", timeout=self._timeout(timeout))
        if resp.status_code == 404:
            return
        resp.raise_for_status()

    def update_record(self, record: DnsRecord, timeout: float | None = None) -> None:
        self.client.put(
            f"/records/{record.domain_name}", json=record_to_json(record), timeout=self._timeout(timeout)
        ).raise_for_status()
