import logging
import os

from dnsr import db
from dnsr.settings import Settings


def test_log_event_persists_and_mirrors_to_logger(caplog):
    with caplog.at_level(logging.INFO, logger="dnsr"):
        db.log_event("warn", "provider slow", phase="update", domain_name="web.example.com")
    row = db.latest_events(1)[0]
    assert row["level"] == "WARN"
    assert row["phase"] == "update"
    assert row["domain_name"] == "web.example.com"
    assert "provider slow" in caplog.text


def test_record_run_roundtrip():
    db.record_run("2024-01-01T00:00:00Z", ok=True, added=2, removed=1, updated=0)
    db.record_run("2024-01-01T00:01:00Z", ok=False, error="boom", dry_run=True)
    latest, previous = db.latest_runs(2)
    assert not latest.ok and latest.error == "boom" and latest.dry_run
    assert previous.ok and (previous.added, previous.removed, previous.updated) == (2, 1, 0)


def test_directory_db_path_gets_a_file_inside(tmp_path, monkeypatch):
    target = tmp_path / "mounted"
    target.mkdir()
    monkeypatch.setattr(db, "settings", Settings(db_path=str(target)))
    db.init_db()
    assert os.path.isfile(target / "dnsr.db")
