from __future__ import annotations

import asyncio
from typing import Protocol

from loguru import logger

from .errors import FetchFailure, UploadFailure
from .models import UploadHandle
from .store import ContentStore
from .tools.docs import extract_text_from_bytes
from .tools.web import download_to_store, text_from_response_bytes


class ContentFetcher(Protocol):
    async def fetch(self, url: str) -> str: ...

    async def store(self, handle: UploadHandle) -> str: ...


class StoreBackedFetcher:
    """Persists fetched and uploaded content to a ``ContentStore`` before reading it back as text.

    Blocking HTTP and disk work runs in worker threads so the event loop is never held
    while a download is pending. Network timeouts come from ``timeout`` and surface as
    ``FetchFailure`` like any other retrieval error.
    """

    def __init__(
        self,
        store: ContentStore,
        timeout: float = 30,
        max_bytes: int = 40 * 1024 * 1024,
        allow_private_hosts: bool = False,
    ) -> None:
        self.content_store = store
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.allow_private_hosts = allow_private_hosts

    async def fetch(self, url: str) -> str:
        try:
            return await asyncio.to_thread(self._fetch_sync, url)
        except Exception as exc:
            logger.warning("Fetch failed for {}: {}", url, exc)
            raise FetchFailure(url, exc) from exc

    def _fetch_sync(self, url: str) -> str:
        path, content_type = download_to_store(
            url,
            self.content_store,
            timeout=self.timeout,
            max_bytes=self.max_bytes,
            allow_private_hosts=self.allow_private_hosts,
        )
        data = self.content_store.read_bytes(path)
        text, kind = text_from_response_bytes(url, data, content_type)
        logger.info("Fetched {} ({}, {} bytes) into {}", url, kind, len(data), path.name)
        return text

    async def store(self, handle: UploadHandle) -> str:
        name = getattr(handle, "filename", None) or "upload.txt"
        try:
            data = await handle.read()
        except Exception as exc:
            raise UploadFailure("Failed to retrieve uploaded file", exc) from exc

        if not data:
            raise UploadFailure("File upload to local storage has failed. No file found.")
        if len(data) > self.max_bytes:
            raise UploadFailure(f"Upload too large: {len(data)} bytes exceeds {self.max_bytes}")

        try:
            return await asyncio.to_thread(self._store_sync, name, data)
        except Exception as exc:
            logger.warning("Upload {} could not be stored: {}", name, exc)
            raise UploadFailure("Failed to retrieve uploaded file", exc) from exc

    def _store_sync(self, name: str, data: bytes) -> str:
        path = self.content_store.save_bytes(data, name_hint=name)
        text, kind = extract_text_from_bytes(name, self.content_store.read_bytes(path))
        logger.info("Stored upload {} ({}, {} bytes) as {}", name, kind, len(data), path.name)
        return text
