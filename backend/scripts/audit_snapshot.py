from __future__ import annotations

import argparse
import shutil
from typing import Optional

from _audit_utils import (
    BACKUPS_DIR,
    SnapshotMeta,
    event_counts,
    now_ts,
    read_events,
    replay_check,
    resolve_event_log,
    sha256_file,
)


def audit_snapshot(log: Optional[str] = None) -> int:
    log_path = resolve_event_log(log)
    if log_path is None:
        print("[ERR] No event log configured: pass --log or set EVENT_LOG_PATH")
        return 2
    if not log_path.exists():
        print(f"[ERR] Event log not found: {log_path}")
        return 2

    BACKUPS_DIR.mkdir(parents=True, exist_ok=True)
    ts = now_ts()
    snapshot = BACKUPS_DIR / f"events-{ts}.jsonl"
    meta_path = BACKUPS_DIR / f"events-{ts}.json"

    shutil.copy2(log_path, snapshot)

    sha = sha256_file(snapshot)
    events, parse_error = read_events(snapshot)
    if parse_error:
        ok, integrity_msg = False, parse_error
    else:
        ok, integrity_msg = replay_check(events)
    counts = event_counts(events)

    meta = SnapshotMeta(
        timestamp=ts,
        event_log=str(log_path),
        snapshot_file=str(snapshot),
        snapshot_size=snapshot.stat().st_size,
        sha256=sha,
        integrity_check=integrity_msg,
        event_counts=counts,
    )
    meta_path.write_text(meta.to_json(), encoding="utf-8")

    print(
        "[OK] Audit snapshot created:\n"
        f"- LOG: {log_path}\n"
        f"- SNAPSHOT: {snapshot}\n"
        f"- META: {meta_path}"
    )
    print(f"[INFO] sha256={sha} integrity_check={integrity_msg} events={len(events)}")
    return 0 if ok else 1


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Snapshot the election event log and verify its vote invariants."
    )
    parser.add_argument("--log", help="event log to snapshot (defaults to EVENT_LOG_PATH)")
    return parser.parse_args()


if __name__ == "__main__":
    args = _parse_args()
    raise SystemExit(audit_snapshot(args.log))
