from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from threading import Event, Lock, Thread

from . import db
from .applier import ConcurrentApplier, Operation
from .current import ProviderStateReader
from .desired import DesiredStateBuilder
from .diff import RecordSetDiff, diff
from .errors import ApplyError, DiscoveryReadError, PhaseError, ReconcileError
from .metadata import Discovery
from .providers import Provider
from .records import DEFAULT_TTL, RecordSet
from .runtime import RunStatus, RuntimeState

log = logging.getLogger(__name__)

# Fixed order: adds, then removes, then updates.
PHASES: tuple[tuple[Operation, str, str], ...] = (
    (Operation.ADD, "to_add", "Failed to add missing records"),
    (Operation.REMOVE, "to_remove", "Failed to remove extra records"),
    (Operation.UPDATE, "to_update", "Failed to update existing records"),
)


@dataclass
class ReconcilePass:
    desired: RecordSet
    current: RecordSet
    diff: RecordSetDiff
    applied: bool


class Reconciler:
    """One reconciliation pass: read desired, read current, diff, apply.

    Phases run one after another and stop at the first failing phase; records
    inside a phase are applied concurrently.
    """

    def __init__(
        self,
        discovery: Discovery,
        provider: Provider,
        environment_name: str,
        root_domain: str,
        ttl: int = DEFAULT_TTL,
        max_workers: int = 8,
        apply_timeout_s: float | None = None,
    ):
        self.discovery = discovery
        self.provider = provider
        self.builder = DesiredStateBuilder(environment_name, root_domain, discovery.resolve_host, ttl=ttl)
        self.reader = ProviderStateReader(environment_name, root_domain)
        self.applier = ConcurrentApplier(provider, max_workers=max_workers)
        self.apply_timeout_s = apply_timeout_s or None

    def read_desired(self) -> RecordSet:
        try:
            instances = self.discovery.list_service_instances()
        except DiscoveryReadError:
            raise
        except Exception as e:
            raise DiscoveryReadError(f"Error reading external dns entries: {e}") from e
        records = self.builder.build(instances)
        log.debug("DNS records from metadata: %s", [str(r) for r in records.sorted_records()])
        return records

    def read_current(self) -> RecordSet:
        records = self.reader.fetch(self.provider)
        log.debug("DNS records from provider: %s", [str(r) for r in records.sorted_records()])
        return records

    def plan(self) -> ReconcilePass:
        desired = self.read_desired()
        current = self.read_current()
        return ReconcilePass(desired=desired, current=current, diff=diff(desired, current), applied=False)

    def reconcile(self, timeout_s: float | None = None) -> ReconcilePass:
        p = self.plan()
        timeout_s = timeout_s or self.apply_timeout_s
        for op, attr, message in PHASES:
            records = getattr(p.diff, attr)
            if not records:
                log.debug("No DNS records to %s", op.value)
                continue
            log.info("DNS records to %s: %s", op.value, [str(r) for r in records])
            try:
                self.applier.apply(records, op, timeout_s=timeout_s)
            except ApplyError as e:
                raise PhaseError(op.value, message, e) from e
        p.applied = True
        return p


class ReconcileLoop:
    """Runs reconciliation passes on an interval, or sooner when triggered."""

    def __init__(self, reconciler: Reconciler, runtime: RuntimeState, interval_s: int = 60):
        self.reconciler = reconciler
        self.runtime = runtime
        self.interval_s = max(1, int(interval_s))
        self._stop = Event()
        self._wake = Event()
        self._pass_lock = Lock()
        self._thr: Thread | None = None

    def start(self) -> None:
        if self._thr and self._thr.is_alive():
            return
        self._stop.clear()
        self._thr = Thread(target=self._loop, name="dnsr-loop", daemon=True)
        self._thr.start()

    @property
    def running(self) -> bool:
        return bool(self._thr and self._thr.is_alive())

    def stop(self) -> None:
        self._stop.set()
        self._wake.set()

    def trigger(self) -> None:
        """Request a pass now, e.g. on a change notification from discovery."""
        self._wake.set()

    def _loop(self) -> None:
        db.log_event("INFO", "Reconcile loop started")
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception as e:
                # Already recorded by run_once.
                log.debug("Reconcile pass failed: %s", e)
            self._wake.wait(self.interval_s)
            self._wake.clear()
        db.log_event("INFO", "Reconcile loop stopped")

    def run_once(self, dry_run: bool = False, timeout_s: float | None = None) -> ReconcilePass:
        with self._pass_lock:
            st = self.runtime.begin(dry_run=dry_run)
            try:
                if dry_run:
                    p = self.reconciler.plan()
                else:
                    p = self.reconciler.reconcile(timeout_s=timeout_s)
            except ReconcileError as e:
                self._record_failure(st, e)
                raise
            except Exception as e:
                self._record_failure(st, e, unexpected=True)
                raise

            counts = p.diff.counts()
            self.runtime.set_desired(p.desired)
            msg = "Dry run" if dry_run else "Reconciled"
            msg += f": +{counts['added']} -{counts['removed']} ~{counts['updated']} ={counts['unchanged']}"
            self.runtime.finish(st, True, msg, counts)
            db.record_run(
                st.started_at,
                ok=True,
                added=counts["added"],
                removed=counts["removed"],
                updated=counts["updated"],
                dry_run=dry_run,
            )
            if p.diff.empty:
                log.debug("%s", msg)
            else:
                db.log_event("INFO", msg)
            return p

    def _record_failure(self, st: RunStatus, e: Exception, unexpected: bool = False) -> None:
        msg = f"Reconcile pass failed: {type(e).__name__}: {e}" if unexpected else f"Reconcile pass failed: {e}"
        self.runtime.finish(st, False, msg)
        # The pass error is what the caller sees; a failing event log must not replace it.
        try:
            db.record_run(st.started_at, ok=False, error=str(e), dry_run=st.dry_run)
            db.log_event("ERROR", msg)
            if isinstance(e, PhaseError):
                for f in e.cause.failures:
                    db.log_event("ERROR", str(f), phase=e.phase, domain_name=f.record.domain_name)
        except sqlite3.Error as db_err:
            log.error("%s (event log unavailable: %s)", msg, db_err)
