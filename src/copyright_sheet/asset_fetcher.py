"""Bounded, deduplicated logo downloads."""
from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Protocol, Tuple
from urllib.parse import urlsplit

import httpx

from .config import FetchSettings
from .errors import TransportError
from .models import ContentBlock

logger = logging.getLogger(__name__)


class AssetTransport(Protocol):
    """Retrieves the raw bytes behind a URL."""

    async def get(self, url: str) -> bytes: ...


class HttpxTransport:
    """
    `AssetTransport` over an `httpx.AsyncClient` with a fixed timeout.

    `timeout` bounds each whole request, not just each network step.
    Use it as an async context manager to share one client (and its
    connection pool) across downloads:

        async with HttpxTransport(10.0) as transport:
            await fetch_logos(blocks, transport, settings)

    Outside a context, each `get` opens and closes its own client.
    """

    def __init__(
        self,
        timeout: float,
        client: Optional[httpx.AsyncClient] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout_seconds = timeout
        self._timeout = httpx.Timeout(timeout)
        self._client = client
        self._http_transport = http_transport
        self._owns_client = False

    @property
    def client(self) -> Optional[httpx.AsyncClient]:
        return self._client

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._http_transport,
        )

    async def __aenter__(self) -> "HttpxTransport":
        if self._client is None:
            self._client = self._new_client()
            self._owns_client = True
        return self

    async def __aexit__(self, *args) -> None:
        if self._owns_client:
            client, self._client = self._client, None
            self._owns_client = False
            await client.aclose()

    async def get(self, url: str) -> bytes:
        if self._client is not None:
            return await self._get(self._client, url)
        async with self._new_client() as client:
            return await self._get(client, url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await asyncio.wait_for(
                client.get(url, timeout=self._timeout, follow_redirects=True),
                self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"download {url!r}: no complete response within {self._timeout_seconds}s"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"download {url!r}: {type(e).__name__}: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.error("download failed url=%s status=%s", url, response.status_code)
            raise TransportError(
                f"image download returned non-OK status: {response.status_code}"
            )
        return response.content


def collect_logo_urls(blocks: Iterable[ContentBlock]) -> List[str]:
    """Distinct, non-empty logo URLs across all blocks, sorted."""
    urls = {
        org.logo_url
        for block in blocks
        for org in block.organizations
        if org.logo_url
    }
    return sorted(urls)


def scratch_path_for(url: str, scratch_dir: Path) -> Path:
    """
    Local file for a URL's download.

    The name is a digest of the full URL (so two URLs never share a file)
    followed by the URL's own extension, which later drives format detection.
    """
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:24]
    suffix = PurePosixPath(urlsplit(url).path).suffix.lower()
    if not suffix.isascii() or len(suffix) > 6:
        suffix = ""
    return scratch_dir / f"{digest}{suffix}"


async def download_logo(transport: AssetTransport, url: str, dest: Path) -> Path:
    """
    Fetch one logo and write it to `dest`.

    Raises:
        TransportError: On any download or write failure
    """
    data = await transport.get(url)
    try:
        await asyncio.to_thread(dest.write_bytes, data)
    except OSError as e:
        raise TransportError(f"write to {dest}: {e}") from e
    return dest


async def fetch_logos(
    blocks: Iterable[ContentBlock],
    transport: AssetTransport,
    settings: FetchSettings,
) -> Dict[str, Path]:
    """
    Download every distinct logo URL exactly once, at most
    `settings.max_concurrent_downloads` at a time.

    Returns only after all downloads have finished. Failed URLs are
    logged and left out of the result; they never fail the request.

    Returns:
        Mapping of logo URL to the downloaded file
    """
    scratch_dir = settings.scratch_dir
    try:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("failed to create scratch dir path=%s: %s", scratch_dir, e)
        return {}

    urls = collect_logo_urls(blocks)
    if not urls:
        return {}

    semaphore = asyncio.Semaphore(settings.max_concurrent_downloads)

    async def attempt(url: str) -> Tuple[str, Optional[Path]]:
        async with semaphore:
            try:
                dest = scratch_path_for(url, scratch_dir)
                return url, await download_logo(transport, url, dest)
            except (TransportError, ValueError, OSError) as e:
                logger.warning("download failed url=%s: %s", url, e)
                return url, None

    logger.debug("Fetching %d logos", len(urls))
    results = await asyncio.gather(*(attempt(url) for url in urls))

    downloaded = {url: path for url, path in results if path is not None}
    logger.debug("Fetched %d/%d logos", len(downloaded), len(urls))
    return downloaded
