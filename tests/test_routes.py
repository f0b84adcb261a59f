"""HTTP surface: JSON views, admin actions, stats.txt, polling pages, degraded error view."""

import re

import pytest

pytestmark = pytest.mark.asyncio


async def _seed(mock_redis, add_failures, make_failure):
    await mock_redis.sadd("resque:queues", "default", "mail")
    await mock_redis.rpush("resque:queue:default", '{"class": "A", "args": [1]}', '{"class": "B", "args": []}')
    await mock_redis.sadd("resque:workers", "web1:10:default")
    await mock_redis.set(
        "resque:worker:web1:10:default",
        '{"queue": "default", "run_at": "2024/01/01 10:00:00", "payload": {"class": "A", "args": [1]}}',
    )
    await add_failures(
        make_failure("default", "RuntimeError"),
        make_failure("default", "RuntimeError"),
        make_failure("mail", "Timeout"),
    )


async def test_overview(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/v1/overview")
    assert r.status_code == 200
    body = r.json()
    assert body["queues"] == [{"name": "default", "size": 2}, {"name": "mail", "size": 0}]
    assert body["failed"] == 3
    assert [w["id"] for w in body["working"]] == ["web1:10:default"]


async def test_queue_detail_and_remove(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/v1/queues/default")
    assert r.json()["size"] == 2
    assert [j["class"] for j in r.json()["jobs"]] == ["A", "B"]

    r = await client.post("/v1/queues/default/remove")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "action": "remove_queue", "queue": "default"}
    r = await client.get("/v1/queues")
    assert r.json()["queues"] == [{"name": "mail", "size": 0}]


async def test_workers(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/v1/workers")
    assert r.json()["hosts"] == {"web1": ["web1:10:default"]}
    assert len(r.json()["workers"]) == 1
    r = await client.get("/v1/workers/web1:10:default")
    assert r.json()["worker"]["working"] is True
    r = await client.get("/v1/workers/nobody:1:x")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"
    r = await client.get("/v1/working")
    assert r.json()["total"] == 1


async def test_failed_views(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/v1/failed")
    body = r.json()
    assert body["page"]["total"] == 3
    assert [f["index"] for f in body["page"]["items"]] == [0, 1, 2]
    assert body["queues"] == [["default", 2], ["mail", 1]]

    r = await client.get("/v1/failed/default")
    assert r.json()["exceptions"] == [["RuntimeError", 2]]
    assert r.json()["page"]["total"] == 2

    r = await client.get("/v1/failed/default/RuntimeError", params={"start": 1})
    assert r.json()["page"]["total"] == 2
    assert [f["index"] for f in r.json()["page"]["items"]] == [1]

    r = await client.get("/v1/failed/default/Missing")
    assert r.status_code == 200
    assert r.json()["page"]["items"] == []
    assert r.json()["page"]["total"] == 0


async def test_requeue_and_remove_one(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.post("/v1/failed/requeue/2")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["retried_at"]
    assert await mock_redis.llen("resque:queue:mail") == 1

    r = await client.post("/v1/failed/remove/0")
    assert r.json() == {"ok": True, "action": "remove_failure", "index": 0}
    assert await mock_redis.llen("resque:failed") == 2

    r = await client.post("/v1/failed/remove/9")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "INDEX_OUT_OF_RANGE"
    assert "ok" not in r.json()


async def test_bulk_admin_actions(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.post("/v1/failed/requeue/all")
    assert r.json()["requeued"] == 3
    assert await mock_redis.llen("resque:queue:default") == 4

    r = await client.post("/v1/failed/clear/default/RuntimeError")
    assert r.json()["removed"] == 2
    r = await client.post("/v1/failed/clear/mail")
    assert r.json()["removed"] == 1
    r = await client.post("/v1/failed/clear")
    assert r.json() == {"ok": True, "action": "clear_failures", "cleared": 0}
    r = await client.post("/v1/failed/clear/mail")
    assert r.json()["removed"] == 0


async def test_key_inspector(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/v1/stats/keys/queue:default")
    assert r.json()["type"] == "list"
    assert r.json()["size"] == 2
    r = await client.get("/v1/stats/keys")
    keys = {k["key"]: k for k in r.json()["keys"]}
    assert keys["queues"]["type"] == "set"
    assert keys["failed"]["size"] == 3
    r = await client.get("/v1/stats/resque")
    assert r.json()["stats"]["pending"] == 2
    r = await client.get("/v1/stats/bogus")
    assert r.status_code == 404


async def test_stats_txt(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/stats.txt")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text.split("\n")[:2] == ["resque.pending=2", "resque.processed+=0"]
    assert r.text.split("\n")[-2:] == ["queues.default=2", "queues.mail=0"]


async def test_overview_page_and_poll(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/overview")
    assert r.status_code == 200
    assert r.headers["cache-control"] == "max-age=0, private, must-revalidate"
    assert 'href="/overview.poll"' in r.text
    assert "<html" in r.text

    r = await client.get("/overview.poll")
    assert r.status_code == 200
    assert "Last Updated:" in r.text
    assert "<html" not in r.text
    assert "\n" not in r.text


async def test_worker_poll_route(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/workers/web1:10:default.poll")
    assert r.status_code == 200
    assert "Last Updated:" in r.text
    assert "web1" in r.text


async def test_root_redirects(client):
    r = await client.get("/")
    assert r.status_code == 307
    assert r.headers["location"] == "/overview"


async def test_unavailable_store_json(unavailable_client):
    r = await unavailable_client.get("/v1/failed")
    assert r.status_code == 503
    assert r.json()["error"]["code"] == "STORE_UNAVAILABLE"
    assert r.json()["error"]["message"] == "Can't connect to Redis! (localhost:6379/0)"
    r = await unavailable_client.post("/v1/failed/requeue/0")
    assert r.status_code == 503


async def test_unavailable_store_renders_error_page(unavailable_client):
    for path in ("/overview", "/overview.poll", "/workers"):
        r = await unavailable_client.get(path)
        assert r.status_code == 503
        assert "connect to Redis! (localhost:6379/0)" in r.text


async def test_every_dashboard_link_resolves(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    seen: dict[str, int] = {}
    pending = ["/overview"]
    while pending:
        path = pending.pop()
        if path in seen:
            continue
        r = await client.get(path)
        seen[path] = r.status_code
        pending.extend(re.findall(r'href="([^"]+)"', r.text))
    assert {"/working", "/failed", "/queues", "/queues/default", "/stats", "/workers/all"} <= set(seen)
    assert {path: code for path, code in seen.items() if code != 200} == {}


async def test_html_tab_pages(client, mock_redis, add_failures, make_failure):
    await _seed(mock_redis, add_failures, make_failure)
    r = await client.get("/queues/default")
    assert r.headers["cache-control"] == "max-age=0, private, must-revalidate"
    assert "Showing 1 to 2 of 2 jobs" in r.text
    assert "[1]" in r.text
    r = await client.get("/failed")
    assert "Showing 3 of 3 failed jobs" in r.text
    assert "RuntimeError" in r.text
    r = await client.get("/working")
    assert "1 of 1 Workers Working" in r.text
    r = await client.get("/stats")
    assert "pending" in r.text
    assert "Live Poll" not in r.text
