from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from enum import Enum
from threading import Lock
from typing import TYPE_CHECKING, Sequence

from .errors import ApplyError, ProviderWriteError
from .records import DnsRecord

if TYPE_CHECKING:
    from .providers import Provider

log = logging.getLogger(__name__)


class Operation(Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"

    @property
    def gerund(self) -> str:
        return {"add": "Adding", "remove": "Removing", "update": "Updating"}[self.value]


class DeadlineExceeded(TimeoutError):
    pass


class ConcurrentApplier:
    """Runs one provider call per record on a bounded worker pool.

    `apply` blocks until every submitted call has finished, then raises a single
    ApplyError listing every failed record. A failure never stops the other calls.
    """

    def __init__(self, provider: Provider, max_workers: int = 8):
        self.provider = provider
        self.max_workers = max(1, int(max_workers))

    def _call(self, operation: Operation):
        if operation is Operation.ADD:
            return self.provider.add_record
        if operation is Operation.REMOVE:
            return self.provider.remove_record
        return self.provider.update_record

    def apply(self, records: Sequence[DnsRecord], operation: Operation, timeout_s: float | None = None) -> None:
        if not records:
            return

        call = self._call(operation)
        deadline = time.monotonic() + timeout_s if timeout_s else None
        lock = Lock()
        failures: dict[int, ProviderWriteError] = {}

        def fail(idx: int, cause: BaseException) -> None:
            with lock:
                failures[idx] = ProviderWriteError(operation, records[idx], cause)

        def run(idx: int) -> None:
            record = records[idx]
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    fail(idx, DeadlineExceeded("deadline exceeded before dispatch"))
                    return
            log.info("%s dns record: %s", operation.gerund, record)
            try:
                call(record, timeout=remaining)
            except Exception as e:
                fail(idx, e)

        timed_out = False
        pool = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(records)),
            thread_name_prefix=f"dnsr-{operation.value}",
        )
        try:
            futures = {pool.submit(run, i): i for i in range(len(records))}
            _, pending = wait(futures, timeout=timeout_s or None)
            for fut in pending:
                timed_out = True
                # Calls already running are left to finish; queued ones never start.
                if fut.cancel():
                    fail(futures[fut], DeadlineExceeded("deadline exceeded before dispatch"))
        finally:
            pool.shutdown(wait=True)

        timed_out = timed_out or any(isinstance(f.cause, DeadlineExceeded) for f in failures.values())
        if failures or timed_out:
            ordered = [failures[i] for i in sorted(failures)]
            raise ApplyError(operation, ordered, total=len(records), timed_out=timed_out, timeout_s=timeout_s)
