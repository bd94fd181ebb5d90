import pytest
from starlette.testclient import TestClient

from fileserve.options import Options
from fileserve.server import create_app


@pytest.fixture
def docroot(tmp_path):
    """A document root with a sibling secret file outside it."""
    (tmp_path / "secret.txt").write_text("top secret\n")

    root = tmp_path / "pub"
    root.mkdir()
    (root / "hello.txt").write_bytes(b"Hi\n")
    (root / "noext").write_bytes(b"\x00\x01\x02")
    (root / "digits.txt").write_bytes(b"0123456789")

    site = root / "site"
    site.mkdir()
    (site / "index.html").write_text("<h1>home</h1>")

    files = root / "files"
    files.mkdir()
    (files / "b.txt").write_text("b")
    (files / "A.txt").write_text("a")
    (files / "nested").mkdir()
    (files / "x & y.txt").write_text("xy")
    return root


@pytest.fixture
def make_client(docroot):
    def _make(**kwargs):
        options = Options(addr=":8080", dir=str(docroot), **kwargs)
        return TestClient(create_app(options))

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
