import os as _os
import sys
import threading
import time

import pytest

# Ensure project root is importable (so `import main` / `import cli` work without installing)
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from dnsr import db  # noqa: E402
from dnsr.errors import HostResolutionError  # noqa: E402
from dnsr.providers import InMemoryProvider  # noqa: E402
from dnsr.records import DnsRecord, ServiceInstance  # noqa: E402
from dnsr.settings import Settings  # noqa: E402

ENV = "env"
ROOT = "example.com"


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the event log at a throwaway sqlite file."""
    monkeypatch.setattr(db, "settings", Settings(db_path=str(tmp_path / "dnsr.db")))
    db.init_db()
    return tmp_path


class FakeDiscovery:
    def __init__(self, instances=None, hosts=None, error=None):
        self.instances = list(instances or [])
        self.hosts = dict(hosts or {})
        self.error = error
        self.resolved = []

    def list_service_instances(self):
        if self.error is not None:
            raise self.error
        return list(self.instances)

    def resolve_host(self, host_id):
        self.resolved.append(host_id)
        if host_id not in self.hosts:
            raise HostResolutionError(host_id, "unknown host")
        return self.hosts[host_id]


class RecordingProvider(InMemoryProvider):
    """In-memory provider that records calls and fails for chosen domain names."""

    def __init__(self, records=None, fail_on=(), list_error=None, delay_s=0.0):
        super().__init__(records)
        self.fail_on = set(fail_on)
        self.list_error = list_error
        self.delay_s = delay_s
        self.calls = []
        self.timeouts = []
        self._calls_lock = threading.Lock()

    def list_records(self):
        if self.list_error is not None:
            raise self.list_error
        return super().list_records()

    def _record(self, op, record, timeout):
        with self._calls_lock:
            self.calls.append((op, record.domain_name))
            self.timeouts.append(timeout)
        if self.delay_s:
            time.sleep(self.delay_s)
        if record.domain_name in self.fail_on:
            raise RuntimeError(f"provider rejected {record.domain_name}")

    def add_record(self, record, timeout=None):
        self._record("add", record, timeout)
        super().add_record(record, timeout)

    def remove_record(self, record, timeout=None):
        self._record("remove", record, timeout)
        super().remove_record(record, timeout)

    def update_record(self, record, timeout=None):
        self._record("update", record, timeout)
        super().update_record(record, timeout)


def rec(name, *values):
    return DnsRecord(name, tuple(values))


def inst(service, stack="stack", host="h1", name=""):
    return ServiceInstance(service_name=service, stack_name=stack, host_id=host, name=name)


@pytest.fixture
def discovery():
    return FakeDiscovery(hosts={"h1": "10.0.0.1", "h2": "10.0.0.2", "h3": "10.0.0.3"})


@pytest.fixture
def provider():
    return RecordingProvider()
