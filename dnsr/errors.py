from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .applier import Operation
    from .records import DnsRecord


class ReconcileError(Exception):
    """Base class for errors that abort or degrade a reconciliation pass."""


class DiscoveryReadError(ReconcileError):
    pass


class HostResolutionError(ReconcileError):
    def __init__(self, host_id: str, reason: str):
        super().__init__(f"Failed to resolve host '{host_id}': {reason}")
        self.host_id = host_id
        self.reason = reason


class ProviderReadError(ReconcileError):
    pass


class ProviderWriteError(ReconcileError):
    def __init__(self, operation: Operation, record: DnsRecord, cause: BaseException):
        super().__init__(f"Failed to {operation.value} DNS record {record}: {cause}")
        self.operation = operation
        self.record = record
        self.cause = cause


class ApplyError(ReconcileError):
    """Aggregate of every failed provider call in one apply phase."""

    def __init__(
        self,
        operation: Operation,
        failures: list[ProviderWriteError],
        total: int,
        timed_out: bool = False,
        timeout_s: float | None = None,
    ):
        self.operation = operation
        self.failures = list(failures)
        self.total = total
        self.timed_out = timed_out
        self.timeout_s = timeout_s
        super().__init__(self._describe())

    @property
    def failed_domains(self) -> list[str]:
        return [f.record.domain_name for f in self.failures]

    def _describe(self) -> str:
        parts = [f"{len(self.failures)} of {self.total} {self.operation.value} operations failed"]
        if self.timed_out:
            parts.append(f"deadline of {self.timeout_s}s exceeded")
        msg = ", ".join(parts)
        if self.failures:
            msg += ": " + "; ".join(f"{f.record.domain_name}: {f.cause}" for f in self.failures)
        return msg


class PhaseError(ReconcileError):
    def __init__(self, phase: str, message: str, cause: ApplyError):
        super().__init__(f"{message}: {cause}")
        self.phase = phase
        self.cause = cause
