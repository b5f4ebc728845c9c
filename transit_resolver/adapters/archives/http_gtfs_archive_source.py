from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import httpx

from transit_resolver.app.ports.output import IGtfsArchiveSource
from transit_resolver.domain.exceptions import ArchiveUnavailable

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "https://opendata.samtrafiken.se/gtfs/{operator}/{operator}.zip"


@dataclass(slots=True)
class HttpGtfsArchiveSource(IGtfsArchiveSource):
    """Downloads static GTFS zip archives over HTTP.

    Env vars:
      - GTFS_STATIC_URL_TEMPLATE: URL with an '{operator}' placeholder
        (default: Trafiklab regional static GTFS)
      - GTFS_STATIC_API_KEY: sent as the 'key' query parameter
      - GTFS_STATIC_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - GTFS_STATIC_TIMEOUT_S: request timeout (default 120)

    Notes:
      - Archives are tens of MB; the timeout covers connect and each read.
      - ``transport`` is for tests (httpx.MockTransport).
    """

    url_template: str | None = None
    api_key: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 120.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url_template is None:
            self.url_template = (
                os.getenv("GTFS_STATIC_URL_TEMPLATE") or DEFAULT_URL_TEMPLATE
            )
        if self.api_key is None:
            self.api_key = os.getenv("GTFS_STATIC_API_KEY")
        if self.headers_raw is None:
            self.headers_raw = os.getenv("GTFS_STATIC_HEADERS")
        if os.getenv("GTFS_STATIC_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GTFS_STATIC_TIMEOUT_S"])

    def url_for(self, operator_key: str) -> str:
        template = self.url_template or DEFAULT_URL_TEMPLATE
        return template.format(operator=operator_key)

    def _headers(self) -> dict[str, str]:
        raw = (self.headers_raw or "").strip()
        if not raw:
            return {}
        headers: dict[str, str] = {}
        for part in raw.split(";"):
            part = part.strip()
            if not part or ":" not in part:
                continue
            k, v = part.split(":", 1)
            k = k.strip()
            if k:
                headers[k] = v.strip()
        return headers

    def _params(self) -> dict[str, str]:
        if not self.api_key:
            logger.warning("GTFS_STATIC_API_KEY not set; requesting without a key")
            return {}
        return {"key": self.api_key}

    async def fetch_archive(self, operator_key: str) -> bytes:
        try:
            url = self.url_for(operator_key)
        except (KeyError, IndexError, ValueError) as exc:
            raise ArchiveUnavailable(
                f"Bad URL template {self.url_template!r}: {exc!r}"
            ) from exc

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                resp = await client.get(
                    url, params=self._params(), headers=self._headers()
                )
                resp.raise_for_status()
                return resp.content
        except httpx.HTTPStatusError as exc:
            raise ArchiveUnavailable(
                f"GET {url} -> {exc.response.status_code} {exc.response.reason_phrase}"
            ) from exc
        except httpx.InvalidURL as exc:
            raise ArchiveUnavailable(f"GET {url!r} invalid URL: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ArchiveUnavailable(f"GET {url} failed: {exc}") from exc
