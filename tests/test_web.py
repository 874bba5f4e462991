import asyncio

import pytest
import requests

from wordcounter.errors import FetchFailure, UploadFailure
from wordcounter.fetcher import StoreBackedFetcher
from wordcounter.store import ContentStore
from wordcounter.tools import web
from wordcounter.tools.web import _filename_from_response, assert_safe_remote_url, download_to_store, text_from_response_bytes


class _FakeResponse:
    def __init__(self, chunks: list[bytes], content_type: str = "text/plain", status: int = 200) -> None:
        self._chunks = chunks
        self.status_code = status
        self.headers = {"Content-Type": content_type}

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc) -> bool:  # type: ignore[no-untyped-def]
        return False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def iter_content(self, chunk_size: int = 65536):  # type: ignore[no-untyped-def]
        return iter(self._chunks)


def test_rejects_loopback_target() -> None:
    with pytest.raises(ValueError):
        assert_safe_remote_url("http://127.0.0.1:8000/private")


def test_rejects_localhost_target() -> None:
    with pytest.raises(ValueError):
        assert_safe_remote_url("http://localhost:8000/file.txt")


def test_rejects_non_http_scheme() -> None:
    with pytest.raises(ValueError):
        assert_safe_remote_url("ftp://example.com/file.txt")


def test_private_hosts_allowed_when_configured() -> None:
    assert_safe_remote_url("http://localhost:8000/file.txt", allow_private_hosts=True)


def test_html_is_reduced_to_visible_text() -> None:
    html = b"<html><head><script>var x = 1;</script></head><body><main>Hello there world</main></body></html>"
    text, kind = text_from_response_bytes("https://example.com/", html, "text/html; charset=utf-8")
    assert kind == "html"
    assert text == "Hello there world"


def test_html_keeps_every_part_of_the_body() -> None:
    html = (
        b"<html><body><header>Chapter one intro</header><main>Hello there world</main>"
        b"<footer>the end</footer><style>p { color: red; }</style></body></html>"
    )
    text, kind = text_from_response_bytes("https://example.com/", html, "text/html")
    assert kind == "html"
    assert text.split() == ["Chapter", "one", "intro", "Hello", "there", "world", "the", "end"]


def test_plain_text_is_decoded() -> None:
    text, kind = text_from_response_bytes("https://example.com/a.txt", "café au lait".encode("utf-8"))
    assert kind == "text"
    assert text == "café au lait"


def test_filename_from_headers_and_url() -> None:
    assert _filename_from_response("https://example.com/x", 'attachment; filename="my book.txt"') == "my_book.txt"
    assert _filename_from_response("https://example.com/files/bible_daily.txt", None) == "bible_daily.txt"


def test_download_to_store_streams_into_store(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(web.requests, "get", lambda url, **kwargs: _FakeResponse([b"one ", b"", b"two"]))
    store = ContentStore(tmp_path)
    path, content_type = download_to_store("https://example.com/book.txt", store, allow_private_hosts=True)
    assert path.parent == store.root
    assert path.name.endswith("book.txt")
    assert store.read_bytes(path) == b"one two"
    assert content_type == "text/plain"


def test_download_size_cap(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(web.requests, "get", lambda url, **kwargs: _FakeResponse([b"x" * 10, b"y" * 10]))
    with pytest.raises(ValueError):
        download_to_store("https://example.com/big.txt", ContentStore(tmp_path), max_bytes=15, allow_private_hosts=True)


def test_fetcher_wraps_http_errors(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(web.requests, "get", lambda url, **kwargs: _FakeResponse([], status=404))
    fetcher = StoreBackedFetcher(ContentStore(tmp_path), allow_private_hosts=True)
    with pytest.raises(FetchFailure) as err:
        asyncio.run(fetcher.fetch("https://example.com/missing.txt"))
    assert "404" in err.value.detail
    assert err.value.url == "https://example.com/missing.txt"


def test_fetcher_wraps_timeouts(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    def _timeout(url, **kwargs):  # type: ignore[no-untyped-def]
        raise requests.exceptions.ConnectTimeout("Connection to example.com timed out. (connect timeout=1)")

    monkeypatch.setattr(web.requests, "get", _timeout)
    fetcher = StoreBackedFetcher(ContentStore(tmp_path), timeout=1, allow_private_hosts=True)
    with pytest.raises(FetchFailure) as err:
        asyncio.run(fetcher.fetch("https://example.com/slow.txt"))
    assert "timed out" in str(err.value)


def test_fetcher_rejects_unsafe_url(tmp_path) -> None:  # type: ignore[no-untyped-def]
    fetcher = StoreBackedFetcher(ContentStore(tmp_path))
    with pytest.raises(FetchFailure):
        asyncio.run(fetcher.fetch("ftp://example.com/file.txt"))


def test_fetcher_returns_stored_text(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(web.requests, "get", lambda url, **kwargs: _FakeResponse([b"In the beginning"]))
    store = ContentStore(tmp_path)
    fetcher = StoreBackedFetcher(store, allow_private_hosts=True)
    assert asyncio.run(fetcher.fetch("https://example.com/genesis.txt")) == "In the beginning"
    assert len(list(store.root.iterdir())) == 1


class _Upload:
    def __init__(self, data: bytes, filename: str | None = "notes.txt") -> None:
        self.data = data
        self.filename = filename

    async def read(self) -> bytes:
        return self.data


def test_fetcher_stores_uploads(tmp_path) -> None:  # type: ignore[no-untyped-def]
    store = ContentStore(tmp_path)
    fetcher = StoreBackedFetcher(store)
    assert asyncio.run(fetcher.store(_Upload(b"hello local words"))) == "hello local words"
    assert [p.name.endswith("notes.txt") for p in store.root.iterdir()] == [True]


def test_fetcher_rejects_empty_and_oversized_uploads(tmp_path) -> None:  # type: ignore[no-untyped-def]
    fetcher = StoreBackedFetcher(ContentStore(tmp_path), max_bytes=4)
    with pytest.raises(UploadFailure):
        asyncio.run(fetcher.store(_Upload(b"")))
    with pytest.raises(UploadFailure):
        asyncio.run(fetcher.store(_Upload(b"too many bytes")))
