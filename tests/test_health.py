# tests/test_health.py
def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"x-request-id": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"

def test_request_id_generated(client):
    assert client.get("/health").headers.get("X-Request-ID")

def test_guest_registration(client):
    r = client.post("/guests", json={"guest_id": "guest_zed"})
    assert r.status_code == 200
    assert r.json()["created"] is True
    assert r.json()["data"]["guest_id"] == "guest_zed"
    assert client.post("/guests", json={"guest_id": "guest_zed"}).json()["created"] is False

def test_guest_id_generated_when_missing(client):
    body = client.post("/guests", json={}).json()
    assert body["data"]["guest_id"].startswith("guest_")

def test_health_details_without_llm(client):
    body = client.get("/health/details").json()
    assert body == {"status": "ok", "database": "ok", "analyzer": "heuristic", "scheduler": "stopped"}

def test_unknown_route_uses_error_envelope(client):
    r = client.get("/no-such-route")
    assert r.status_code == 404
    assert r.json()["success"] is False


def _timed_request(client, mocker, seconds):
    clock = mocker.patch("democracy_lens.middleware.time")
    clock.perf_counter.side_effect = [100.0, 100.0 + seconds]
    log = mocker.patch("democracy_lens.middleware.logger")
    assert client.get("/health").status_code == 200
    return log

def test_request_at_slow_threshold_is_not_slow(client, mocker):
    log = _timed_request(client, mocker, 2.0)
    log.warning.assert_not_called()
    log.debug.assert_called_once()
    assert log.debug.call_args.kwargs["extra"]["elapsed_ms"] == 2000.0

def test_request_over_slow_threshold_warns(client, mocker):
    log = _timed_request(client, mocker, 2.5)
    log.warning.assert_called_once()
    assert log.warning.call_args.args[0] == "REQUEST_SLOW"
