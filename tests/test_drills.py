from datetime import UTC, datetime

from cache import ListingCache
from catalog import DrillCatalog, split_tags
from db import SessionLocal
from models import Drill


def test_list_drills_default(client):
    r = client.get("/api/drills")
    assert r.status_code == 200
    body = r.json()
    assert len(body["drills"]) == 6
    assert body["pagination"] == {"page": 1, "limit": 50, "total": 6, "pages": 1}
    d = body["drills"][0]
    assert {"id", "title", "difficulty", "tags", "questions"}.issubset(d.keys())
    assert r.headers["etag"].startswith('W/"')
    assert "max-age=60" in r.headers["cache-control"]


def test_list_drills_etag_roundtrip(client):
    r1 = client.get("/api/drills")
    etag = r1.headers["etag"]

    r2 = client.get("/api/drills", headers={"If-None-Match": etag})
    assert r2.status_code == 304
    assert r2.content == b""

    r3 = client.get("/api/drills", headers={"If-None-Match": 'W/"stale"'})
    assert r3.status_code == 200


def test_filter_by_difficulty(client):
    r = client.get("/api/drills", params={"difficulty": "easy"})
    assert r.status_code == 200
    drills = r.json()["drills"]
    assert {d["id"] for d in drills} == {"js-fundamentals", "api-design"}
    assert "cache-control" not in r.headers


def test_filter_by_any_tag(client):
    r = client.get("/api/drills", params={"tags": "react, sql"})
    assert {d["id"] for d in r.json()["drills"]} == {"react-hooks", "db-design"}


def test_search_title_and_tags_case_insensitive(client):
    r = client.get("/api/drills", params={"search": "DESIGN"})
    assert {d["id"] for d in r.json()["drills"]} == {"system-design", "db-design", "api-design"}


def test_pagination(client):
    r = client.get("/api/drills", params={"limit": 4, "page": 2})
    body = r.json()
    assert len(body["drills"]) == 2
    assert body["pagination"] == {"page": 2, "limit": 4, "total": 6, "pages": 2}


def test_invalid_difficulty_is_validation_error(client):
    r = client.get("/api/drills", params={"difficulty": "extreme"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "VALIDATION_ERROR"
    assert err["details"][0]["field"] == "difficulty"


def test_get_drill_detail_keeps_question_order(client):
    r = client.get("/api/drills/js-fundamentals")
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "JavaScript Fundamentals"
    assert [q["id"] for q in body["questions"]] == ["js-1", "js-2", "js-3"]


def test_get_drill_404(client):
    r = client.get("/api/drills/missing")
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NOT_FOUND", "message": "Drill not found"}}


def test_split_tags():
    assert split_tags(None) == []
    assert split_tags(" a, ,b ") == ["a", "b"]


def test_default_listing_is_cached_until_ttl():
    now = [0.0]
    cat = DrillCatalog(ListingCache(clock=lambda: now[0]), ttl_seconds=60)

    with SessionLocal() as db:
        first = cat.listing(db)
        extra = Drill(
            id="tmp-cache-drill",
            title="Temporary",
            tags=[],
            questions=[],
            created_at=datetime.now(UTC),
        )
        db.add(extra)
        db.commit()
        try:
            # within TTL the stale listing is served
            now[0] = 30
            assert cat.listing(db) is first
            assert first.pagination.total == 6

            # non-default parameters always hit the database
            assert cat.listing(db, search="temporary").pagination.total == 1

            now[0] = 60
            fresh = cat.listing(db)
            assert fresh is not first
            assert fresh.pagination.total == 7
        finally:
            db.delete(extra)
            db.commit()
