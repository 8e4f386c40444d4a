"""Concurrent image fetch for vision analysis."""

from __future__ import annotations

import base64
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import httpx

from ..logging import get_logger
from ..models import LookupSettings

log = get_logger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; PropertyBot/1.0)"


@dataclass(frozen=True)
class FetchedImage:
    """A base64-encoded image ready for a vision request."""

    media_type: str
    data: str
    url: str = ""


def _read_capped(resp: httpx.Response, limit: int) -> bytes | None:
    """Read a streamed body, giving up as soon as it exceeds ``limit`` bytes."""
    declared = resp.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        return None
    body = bytearray()
    for chunk in resp.iter_bytes():
        body.extend(chunk)
        if len(body) > limit:
            return None
    return bytes(body)


def fetch_image(url: str, client: httpx.Client, settings: LookupSettings) -> FetchedImage | None:
    """Fetch one image. Any failure yields None, never an exception."""
    try:
        with client.stream("GET", url, timeout=settings.image_timeout_seconds) as resp:
            if resp.status_code != 200:
                log.debug("lookup.image_failed", url=url, status=resp.status_code)
                return None

            content_type = resp.headers.get("content-type", "")
            if not content_type.startswith("image/"):
                log.debug("lookup.image_skipped", url=url, content_type=content_type)
                return None

            body = _read_capped(resp, settings.max_image_bytes)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        log.debug("lookup.image_failed", url=url, error=str(e))
        return None

    if body is None:
        log.debug("lookup.image_skipped", url=url, reason="too large")
        return None
    # Tiny files are icons/spacers.
    if len(body) < settings.min_image_bytes:
        log.debug("lookup.image_skipped", url=url, size=len(body))
        return None

    return FetchedImage(
        media_type=content_type.split(";")[0].strip(),
        data=base64.b64encode(body).decode("ascii"),
        url=url,
    )


def fetch_images(
    urls: list[str],
    settings: LookupSettings,
    client: httpx.Client | None = None,
) -> list[FetchedImage]:
    """Fetch up to ``settings.max_images`` images in parallel, one worker each.

    Order follows ``urls``; failed fetches are dropped.
    """
    urls = urls[: settings.max_images]
    if not urls:
        return []

    own_client = client is None
    if client is None:
        client = httpx.Client(headers={"User-Agent": USER_AGENT}, follow_redirects=True)
    try:
        with ThreadPoolExecutor(max_workers=len(urls)) as executor:
            results = list(executor.map(lambda u: fetch_image(u, client, settings), urls))
    finally:
        if own_client:
            client.close()

    return [r for r in results if r is not None]
