from __future__ import annotations

import argparse
import json
import sys

import requests


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="DNS Service Reconciler CLI")
    p.add_argument("--api", default="http://localhost:8000", help="API base URL")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("status", help="Show reconciler status and the last pass")
    sub.add_parser("records", help="Show the desired record set from the last pass")

    s_ev = sub.add_parser("events", help="Show events")
    s_ev.add_argument("--limit", type=int, default=20)

    s_runs = sub.add_parser("runs", help="Show recent reconciliation passes")
    s_runs.add_argument("--limit", type=int, default=20)

    s_rec = sub.add_parser("reconcile", help="Run a reconciliation pass now")
    s_rec.add_argument("--dry-run", action="store_true", help="Only compute the diff")
    s_rec.add_argument("--timeout-s", type=float, default=None, help="Deadline for each apply phase")

    sub.add_parser("trigger", help="Wake the background loop")

    args = p.parse_args(argv)

    base = args.api.rstrip("/")

    if args.cmd in {"status", "records"}:
        _print(requests.get(f"{base}/{args.cmd}", timeout=10).json())
        return 0

    if args.cmd in {"events", "runs"}:
        _print(requests.get(f"{base}/{args.cmd}", params={"limit": args.limit}, timeout=10).json())
        return 0

    if args.cmd == "reconcile":
        payload = {"dry_run": args.dry_run, "timeout_s": args.timeout_s}
        r = requests.post(f"{base}/reconcile", json=payload, timeout=300)
        _print(r.json())
        return 0 if r.ok else 1

    if args.cmd == "trigger":
        r = requests.post(f"{base}/trigger", timeout=10)
        _print(r.json())
        return 0 if r.ok else 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
