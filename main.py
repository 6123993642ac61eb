from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import FastAPI, HTTPException

from dnsr import db
from dnsr.api_models import DiffOut, ReconcileRequest, ReconcileResponse, RecordOut, RunStatusOut, StatusResponse
from dnsr.docker_ops import DockerDiscovery
from dnsr.errors import ReconcileError
from dnsr.metadata import Discovery, MetadataDiscovery
from dnsr.providers import HttpProvider, InMemoryProvider, Provider
from dnsr.reconciler import ReconcileLoop, Reconciler
from dnsr.runtime import RuntimeState
from dnsr.settings import Settings, settings

app = FastAPI(title="DNS Service Reconciler")

runtime = RuntimeState()
reconciler: Reconciler | None = None
loop: ReconcileLoop | None = None


def build_discovery(cfg: Settings) -> Discovery:
    if cfg.discovery == "metadata":
        return MetadataDiscovery(cfg.metadata_url, timeout_s=cfg.http_timeout_s)
    if cfg.discovery == "docker":
        return DockerDiscovery(cfg.docker_host_ips, default_host=cfg.docker_host)
    raise ValueError(f"Unknown discovery source '{cfg.discovery}' (expected metadata|docker).")


def build_provider(cfg: Settings) -> Provider:
    if cfg.provider == "http":
        return HttpProvider(cfg.provider_url, token=cfg.provider_token, timeout_s=cfg.http_timeout_s)
    if cfg.provider == "memory":
        return InMemoryProvider()
    raise ValueError(f"Unknown provider '{cfg.provider}' (expected http|memory).")


def build_reconciler(cfg: Settings) -> Reconciler:
    return Reconciler(
        discovery=build_discovery(cfg),
        provider=build_provider(cfg),
        environment_name=cfg.environment_name,
        root_domain=cfg.root_domain,
        ttl=cfg.ttl,
        max_workers=cfg.apply_workers,
        apply_timeout_s=cfg.apply_timeout_s,
    )


def _loop() -> ReconcileLoop:
    if loop is None:
        raise HTTPException(status_code=503, detail="Reconciler is not initialised.")
    return loop


@app.on_event("startup")
def startup() -> None:
    global reconciler, loop
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    db.init_db()
    if reconciler is None:
        reconciler = build_reconciler(settings)
    loop = ReconcileLoop(reconciler, runtime, interval_s=settings.poll_interval_s)
    if settings.run_loop:
        loop.start()


@app.on_event("shutdown")
def shutdown() -> None:
    if loop is not None:
        loop.stop()


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/status", response_model=StatusResponse)
def status():
    last, passes, failures = runtime.snapshot()
    return StatusResponse(
        environment_name=settings.environment_name,
        root_domain=settings.root_domain,
        discovery=settings.discovery,
        provider=settings.provider,
        loop_running=bool(loop and loop.running),
        passes=passes,
        failures=failures,
        last_run=RunStatusOut(**asdict(last)) if last else None,
    )


@app.get("/records", response_model=list[RecordOut])
def records():
    return [RecordOut.from_record(r) for r in runtime.get_desired().sorted_records()]


@app.get("/events")
def events(limit: int = 100):
    return db.latest_events(max(1, min(1000, limit)))


@app.get("/runs")
def runs(limit: int = 20):
    return [asdict(r) for r in db.latest_runs(max(1, min(1000, limit)))]


@app.post("/reconcile", response_model=ReconcileResponse)
def reconcile(req: ReconcileRequest | None = None):
    req = req or ReconcileRequest()
    try:
        p = _loop().run_once(dry_run=req.dry_run, timeout_s=req.timeout_s)
    except ReconcileError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return ReconcileResponse(applied=p.applied, dry_run=req.dry_run, diff=DiffOut.from_diff(p.diff))


@app.post("/trigger")
def trigger():
    _loop().trigger()
    return {"triggered": True}
