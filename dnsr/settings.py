from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_map(name: str) -> dict[str, str]:
    """Parse `key=value,key=value` pairs; malformed pairs are ignored."""
    out: dict[str, str] = {}
    for pair in os.getenv(name, "").split(","):
        key, sep, value = pair.partition("=")
        if sep and key.strip() and value.strip():
            out[key.strip()] = value.strip()
    return out


@dataclass(frozen=True)
class Settings:
    # Naming
    environment_name: str = os.getenv("DNSR_ENVIRONMENT_NAME", "default")
    root_domain: str = os.getenv("DNSR_ROOT_DOMAIN", "example.com")
    ttl: int = _env_int("DNSR_TTL", 300)

    # Discovery: "metadata" (HTTP metadata service) or "docker" (labelled containers)
    discovery: str = os.getenv("DNSR_DISCOVERY", "metadata")
    metadata_url: str = os.getenv("DNSR_METADATA_URL", "http://rancher-metadata/2015-12-19")
    docker_host: str = os.getenv("DNSR_DOCKER_HOST", "local")
    docker_host_ips: dict[str, str] = field(default_factory=lambda: _env_map("DNSR_DOCKER_HOST_IPS"))

    # Provider: "http" (JSON REST API) or "memory"
    provider: str = os.getenv("DNSR_PROVIDER", "http")
    provider_url: str = os.getenv("DNSR_PROVIDER_URL", "http://localhost:8053")
    provider_token: str | None = os.getenv("DNSR_PROVIDER_TOKEN")
    http_timeout_s: float = _env_float("DNSR_HTTP_TIMEOUT_S", 10.0)

    # Apply
    apply_workers: int = _env_int("DNSR_APPLY_WORKERS", 8)
    # 0 disables the per-phase deadline.
    apply_timeout_s: float = _env_float("DNSR_APPLY_TIMEOUT_S", 60.0)

    # Runner
    poll_interval_s: int = _env_int("DNSR_POLL_INTERVAL_S", 60)
    run_loop: bool = _env_bool("DNSR_RUN_LOOP", True)
    db_path: str = os.getenv("DNSR_DB_PATH", "dnsr.db")
    log_level: str = os.getenv("DNSR_LOG_LEVEL", "INFO")


settings = Settings()
