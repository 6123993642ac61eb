from __future__ import annotations

from pydantic import BaseModel, Field

from .diff import RecordSetDiff
from .records import DnsRecord


class ReconcileRequest(BaseModel):
    dry_run: bool = Field(False, description="Compute the diff without touching the provider")
    timeout_s: float | None = Field(None, gt=0, le=3600, description="Deadline for each apply phase")


class RecordOut(BaseModel):
    domain_name: str
    values: list[str]
    record_type: str
    ttl: int

    @classmethod
    def from_record(cls, r: DnsRecord) -> "RecordOut":
        return cls(domain_name=r.domain_name, values=list(r.values), record_type=r.record_type, ttl=r.ttl)


class DiffOut(BaseModel):
    to_add: list[RecordOut] = Field(default_factory=list)
    to_remove: list[RecordOut] = Field(default_factory=list)
    to_update: list[RecordOut] = Field(default_factory=list)
    unchanged: int = 0

    @classmethod
    def from_diff(cls, d: RecordSetDiff) -> "DiffOut":
        return cls(
            to_add=[RecordOut.from_record(r) for r in d.to_add],
            to_remove=[RecordOut.from_record(r) for r in d.to_remove],
            to_update=[RecordOut.from_record(r) for r in d.to_update],
            unchanged=len(d.unchanged),
        )


class ReconcileResponse(BaseModel):
    applied: bool
    dry_run: bool
    diff: DiffOut


class RunStatusOut(BaseModel):
    started_at: str
    finished_at: str | None = None
    state: str
    dry_run: bool = False
    message: str = ""
    counts: dict[str, int] = Field(default_factory=dict)


class StatusResponse(BaseModel):
    environment_name: str
    root_domain: str
    discovery: str
    provider: str
    loop_running: bool
    passes: int
    failures: int
    last_run: RunStatusOut | None = None
