from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from transit_resolver.adapters.archives import (
    HttpGtfsArchiveSource,
    LocalGtfsArchiveSource,
)
from transit_resolver.app.services.dataset_store import GtfsDatasetStore
from transit_resolver.domain.exceptions import ArchiveUnavailable


def test_http_source_fetches_archive_with_key_and_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"PK-zip-bytes")

    source = HttpGtfsArchiveSource(
        url_template="https://example.test/gtfs/{operator}.zip",
        api_key="secret",
        headers_raw="X-Client: tests; broken; Accept:application/zip",
        transport=httpx.MockTransport(handler),
    )

    content = asyncio.run(source.fetch_archive("ul"))

    assert content == b"PK-zip-bytes"
    assert len(seen) == 1
    assert seen[0].url.path == "/gtfs/ul.zip"
    assert seen[0].url.params["key"] == "secret"
    assert seen[0].headers["X-Client"] == "tests"
    assert seen[0].headers["Accept"] == "application/zip"


def test_http_source_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("GTFS_STATIC_URL_TEMPLATE", "https://mirror.test/{operator}")
    monkeypatch.setenv("GTFS_STATIC_API_KEY", "k")
    monkeypatch.setenv("GTFS_STATIC_TIMEOUT_S", "5")

    source = HttpGtfsArchiveSource()

    assert source.url_for("sl") == "https://mirror.test/sl"
    assert source.api_key == "k"
    assert source.timeout_s == 5.0


def test_http_source_default_url(monkeypatch) -> None:
    monkeypatch.delenv("GTFS_STATIC_URL_TEMPLATE", raising=False)

    source = HttpGtfsArchiveSource()

    assert source.url_for("skane") == (
        "https://opendata.samtrafiken.se/gtfs/skane/skane.zip"
    )


def test_http_source_warns_without_key(monkeypatch, caplog) -> None:
    monkeypatch.delenv("GTFS_STATIC_API_KEY", raising=False)
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"zip")

    source = HttpGtfsArchiveSource(
        url_template="https://example.test/{operator}.zip",
        transport=httpx.MockTransport(handler),
    )

    with caplog.at_level(logging.WARNING):
        asyncio.run(source.fetch_archive("ul"))

    assert "key" not in seen[0].url.params
    assert "GTFS_STATIC_API_KEY not set" in caplog.text


def test_http_error_status_becomes_archive_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    source = HttpGtfsArchiveSource(
        url_template="https://example.test/{operator}.zip",
        api_key="k",
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ArchiveUnavailable, match="404 Not Found"):
        asyncio.run(source.fetch_archive("ul"))


def test_transport_error_becomes_archive_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    source = HttpGtfsArchiveSource(
        url_template="https://example.test/{operator}.zip",
        api_key="k",
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ArchiveUnavailable, match="failed"):
        asyncio.run(source.fetch_archive("ul"))


def test_local_source_reads_operator_zip(tmp_path) -> None:
    (tmp_path / "ul.zip").write_bytes(b"zip-bytes")
    source = LocalGtfsArchiveSource(base_path=tmp_path)

    assert source.path_for("ul") == tmp_path / "ul.zip"
    assert asyncio.run(source.fetch_archive("ul")) == b"zip-bytes"


def test_local_source_uses_env_dir(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("GTFS_ARCHIVE_DIR", str(tmp_path))

    assert LocalGtfsArchiveSource().path_for("sl") == tmp_path / "sl.zip"


def test_local_source_missing_file(tmp_path) -> None:
    source = LocalGtfsArchiveSource(base_path=tmp_path)

    with pytest.raises(ArchiveUnavailable, match="sl.zip"):
        asyncio.run(source.fetch_archive("sl"))


def test_control_character_in_operator_becomes_archive_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request should not be sent")

    source = HttpGtfsArchiveSource(
        url_template="https://example.test/{operator}.zip",
        api_key="k",
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ArchiveUnavailable):
        asyncio.run(source.fetch_archive("bad\x00op"))


@pytest.mark.parametrize(
    "template",
    [
        "https://example.test/{operator}/{region}.zip",
        "https://example.test/{0}.zip",
        "https://example.test/{operator.zip",
    ],
)
def test_broken_url_template_becomes_archive_unavailable(template: str) -> None:
    source = HttpGtfsArchiveSource(url_template=template, api_key="k")

    with pytest.raises(ArchiveUnavailable, match="Bad URL template"):
        asyncio.run(source.fetch_archive("ul"))


def test_store_survives_invalid_operator_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"zip")

    store = GtfsDatasetStore(
        archive_source=HttpGtfsArchiveSource(
            url_template="https://example.test/{operator}.zip",
            api_key="k",
            transport=httpx.MockTransport(handler),
        )
    )

    asyncio.run(store.preload("bad\x00op"))

    assert not store.is_loaded("bad\x00op")
