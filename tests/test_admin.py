import pytest
from sqlalchemy import func, select

import bank
from bank import SeedError, seed_drills
from db import SessionLocal
from models import Drill

INTERNAL = {"error": {"code": "INTERNAL_SERVER_ERROR", "message": "An unexpected error occurred"}}


def _drill_count():
    with SessionLocal() as db:
        return db.scalar(select(func.count(Drill.id)))


def test_admin_reload_unauthorized(client, monkeypatch):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    r = client.post("/admin/reload")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_admin_reload_not_configured(client, monkeypatch):
    monkeypatch.delenv("ADMIN_TOKEN", raising=False)
    r = client.post("/admin/reload", headers={"x-admin-token": "anything"})
    assert r.status_code == 500
    assert r.json() == INTERNAL
    assert "ADMIN_TOKEN" not in r.text


def test_admin_reload_ok_and_refreshes_listing(client, monkeypatch):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    before = client.get("/api/drills").json()

    r = client.post("/admin/reload", headers={"x-admin-token": "secret"})
    assert r.status_code == 200 and r.json() == {"ok": True, "count": 6}

    after = client.get("/api/drills").json()
    assert after["pagination"]["total"] == 6
    assert {d["id"] for d in after["drills"]} == {d["id"] for d in before["drills"]}
    # reseeded rows carry new timestamps, so the cache slot was not reused
    assert after != before


@pytest.mark.parametrize(
    "content",
    ["{not json", '{"id": "x", "title": "not a list"}', '[{"difficulty": "impossible"}]', "[]"],
)
def test_seed_drills_bad_file_keeps_catalog(tmp_path, content):
    bad = tmp_path / "drills.json"
    bad.write_text(content, encoding="utf-8")
    with SessionLocal() as db:
        with pytest.raises(SeedError):
            seed_drills(db, path=bad)
    assert _drill_count() == 6


def test_seed_drills_missing_file_keeps_catalog(tmp_path):
    with SessionLocal() as db:
        with pytest.raises(SeedError):
            seed_drills(db, path=tmp_path / "missing.json")
    assert _drill_count() == 6


def test_admin_reload_bad_file_keeps_catalog(client, monkeypatch, tmp_path):
    bad = tmp_path / "drills.json"
    bad.write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(bank, "DRILLS_SEED_FILE", bad)
    monkeypatch.setenv("ADMIN_TOKEN", "secret")

    r = client.post("/admin/reload", headers={"x-admin-token": "secret"})
    assert r.status_code == 500
    assert r.json() == INTERNAL
    assert client.get("/api/drills").json()["pagination"]["total"] == 6
