import logging

import anyio
import pytest

from fileserve.access import AccessLog

ACCESS = "fileserve.access"


def _records(caplog):
    return [r for r in caplog.records if r.name == ACCESS]


def test_one_record_per_request(client, caplog):
    with caplog.at_level(logging.INFO, logger=ACCESS):
        client.get("/hello.txt")
        client.get("/nope.txt")
    records = _records(caplog)
    assert len(records) == 2
    assert '"GET /hello.txt" 200 3 ' in records[0].getMessage()
    assert '"GET /nope.txt" 404 ' in records[1].getMessage()


def test_record_fields(client, caplog):
    with caplog.at_level(logging.INFO, logger=ACCESS):
        client.get("/digits.txt", headers={"Range": "bytes=0-3"})
    (record,) = _records(caplog)
    remote, method, path, status, size, duration = record.args
    assert remote.startswith("testclient")
    assert (method, path, status, size) == ("GET", "/digits.txt", 206, 4)
    assert duration >= 0
    assert record.getMessage().endswith("ms")


def test_head_logs_zero_size(client, caplog):
    with caplog.at_level(logging.INFO, logger=ACCESS):
        client.head("/digits.txt")
    (record,) = _records(caplog)
    assert record.args[1:5] == ("HEAD", "/digits.txt", 200, 0)


def test_failure_before_response_logged_as_500(caplog):
    async def broken(scope, receive, send):
        raise RuntimeError("boom")

    scope = {"type": "http", "method": "GET", "path": "/x", "client": None}
    with caplog.at_level(logging.INFO, logger=ACCESS):
        with pytest.raises(RuntimeError):
            anyio.run(AccessLog(broken), scope, None, None)
    (record,) = _records(caplog)
    assert record.args[:4] == ("-", "GET", "/x", 500)


def test_non_http_scope_passes_through(caplog):
    seen = []

    async def inner(scope, receive, send):
        seen.append(scope["type"])

    with caplog.at_level(logging.INFO, logger=ACCESS):
        anyio.run(AccessLog(inner), {"type": "lifespan"}, None, None)
    assert seen == ["lifespan"]
    assert _records(caplog) == []


def test_custom_logger(caplog):
    logger = logging.getLogger("tests.access")

    async def ok(scope, receive, send):
        await send({"type": "http.response.start", "status": 204, "headers": []})
        await send({"type": "http.response.body", "body": b""})

    async def discard(message):
        pass

    scope = {"type": "http", "method": "DELETE", "path": "/y", "client": ("10.0.0.1", 1234)}
    with caplog.at_level(logging.INFO, logger="tests.access"):
        anyio.run(AccessLog(ok, logger=logger), scope, None, discard)
    (record,) = [r for r in caplog.records if r.name == "tests.access"]
    assert record.args[:5] == ("10.0.0.1:1234", "DELETE", "/y", 204, 0)


def test_head_on_listing_logs_zero_size(client, caplog):
    with caplog.at_level(logging.INFO, logger=ACCESS):
        res = client.head("/files/")
    assert res.status_code == 200
    (record,) = _records(caplog)
    assert record.args[1:5] == ("HEAD", "/files/", 200, 0)
