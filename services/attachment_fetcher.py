"""Download image attachments referenced by chat messages."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

import httpx

from models.request_models import AttachmentRef
from models.session_models import ImageBlob
from utils.media_validation import is_image_content_type, resolve_image_mime

LOGGER = logging.getLogger(__name__)


class AttachmentFetchError(RuntimeError):
    """Raised when a single attachment cannot be downloaded."""


class AttachmentFetcher:
    """Fetch image attachments concurrently, dropping the ones that fail.

    Args:
        client: Optional shared `httpx.AsyncClient`; a short-lived client is
            opened per call when omitted.
        timeout: Download timeout in seconds.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0) -> None:
        self.client = client
        self.timeout = timeout

    async def fetch_images(self, attachments: Iterable[AttachmentRef]) -> List[ImageBlob]:
        """Return downloaded images in attachment order; non-images and failures are skipped."""
        candidates = []
        for attachment in attachments:
            if not is_image_content_type(attachment.content_type):
                LOGGER.debug("Skipping attachment (not image): %s", attachment.filename)
                continue
            candidates.append(attachment)
        if not candidates:
            return []

        if self.client is not None:
            results = await self._fetch_all(self.client, candidates)
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                results = await self._fetch_all(client, candidates)
        images = [image for image in results if image is not None]
        LOGGER.info("Fetched %d of %d image attachments", len(images), len(candidates))
        return images

    async def _fetch_all(self, client: httpx.AsyncClient, attachments: List[AttachmentRef]) -> List[Optional[ImageBlob]]:
        return await asyncio.gather(*(self._fetch_or_none(client, a) for a in attachments))

    async def _fetch_or_none(self, client: httpx.AsyncClient, attachment: AttachmentRef) -> Optional[ImageBlob]:
        try:
            return await self.fetch(client, attachment)
        except AttachmentFetchError as exc:
            LOGGER.error("Failed to download attachment %s: %s", attachment.filename, exc)
            return None

    async def fetch(self, client: httpx.AsyncClient, attachment: AttachmentRef) -> ImageBlob:
        """Download one attachment or raise AttachmentFetchError."""
        try:
            response = await client.get(attachment.url, timeout=self.timeout)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise AttachmentFetchError(str(exc) or exc.__class__.__name__) from exc
        data = response.content
        if not data:
            raise AttachmentFetchError("empty response body")
        return ImageBlob(data=data, mime_type=resolve_image_mime(data, attachment.content_type))
