from __future__ import annotations

from loguru import logger

from .errors import InvalidRequest, UploadFailure
from .fetcher import ContentFetcher
from .models import Inline, Remote, ResolvedText, TextSource, Uploaded, UploadHandle


def source_from_request(text: str | None, url: str | None) -> TextSource:
    """Pick the text source for a text/URL request. Inline text takes precedence over a URL."""
    if text:
        return Inline(text)
    if url:
        return Remote(url.strip())
    raise InvalidRequest("Cannot process this request. No text or URL to process provided")


def source_from_upload(handle: UploadHandle | None) -> Uploaded:
    if handle is None:
        raise UploadFailure("File upload to local storage has failed. No file found.")
    if getattr(handle, "size", None) == 0:
        raise UploadFailure("File upload to local storage has failed. Uploaded file is empty.")
    return Uploaded(handle)


async def resolve(source: TextSource, fetcher: ContentFetcher) -> ResolvedText:
    if isinstance(source, Inline):
        return ResolvedText(source, source.text)
    if isinstance(source, Remote):
        logger.info("Fetching text from {}", source.url)
        return ResolvedText(source, await fetcher.fetch(source.url))
    if isinstance(source, Uploaded):
        logger.info("Reading uploaded file {}", getattr(source.handle, "filename", None))
        return ResolvedText(source, await fetcher.store(source.handle))
    raise InvalidRequest(f"Unsupported text source: {type(source).__name__}")


def needs_fetch(source: TextSource) -> bool:
    return not isinstance(source, Inline)
