from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from threading import Lock

from .records import RecordSet


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class RunStatus:
    started_at: str
    state: str  # running|ok|failed
    dry_run: bool = False
    message: str = ""
    counts: dict[str, int] = field(default_factory=dict)
    finished_at: str | None = None


class RuntimeState:
    """In-memory view of the most recent reconciliation pass."""

    def __init__(self) -> None:
        self.lock = Lock()
        self.last_run: RunStatus | None = None
        self.desired: RecordSet = RecordSet()
        self.passes = 0
        self.failures = 0

    def begin(self, dry_run: bool = False) -> RunStatus:
        st = RunStatus(started_at=utc_now(), state="running", dry_run=dry_run)
        with self.lock:
            self.last_run = st
        return st

    def finish(self, st: RunStatus, ok: bool, message: str, counts: dict[str, int] | None = None) -> None:
        with self.lock:
            st.state = "ok" if ok else "failed"
            st.message = message
            st.counts = dict(counts or {})
            st.finished_at = utc_now()
            self.passes += 1
            if not ok:
                self.failures += 1

    def set_desired(self, records: RecordSet) -> None:
        with self.lock:
            self.desired = RecordSet(records)

    def get_desired(self) -> RecordSet:
        with self.lock:
            return RecordSet(self.desired)

    def snapshot(self) -> tuple[RunStatus | None, int, int]:
        with self.lock:
            last = replace(self.last_run, counts=dict(self.last_run.counts)) if self.last_run else None
            return last, self.passes, self.failures
