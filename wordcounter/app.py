from __future__ import annotations

import os
from pathlib import Path

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import WordCounterError
from .fetcher import StoreBackedFetcher
from .logs import configure_logging
from .pipeline import analyze_request, analyze_upload
from .store import ContentStore


DATA_DIR = Path(os.getenv("WC_DATA_DIR", ".wc_data")).expanduser()
STORE_DIR = DATA_DIR / "store"
FETCH_TIMEOUT = float(os.getenv("WC_FETCH_TIMEOUT", "30"))
MAX_BYTES = int(os.getenv("WC_MAX_BYTES", str(40 * 1024 * 1024)))
ALLOW_PRIVATE_URLS = os.getenv("WC_ALLOW_PRIVATE_URLS", "0").lower() in {"1", "true", "yes"}
ALLOW_ORIGIN_REGEX = os.getenv("WC_ALLOWED_ORIGIN_REGEX", r"^https?://(127\.0\.0\.1|localhost)(:\d+)?$")
LOG_LEVEL = os.getenv("WC_LOG_LEVEL", "INFO")

configure_logging(LOG_LEVEL)

store = ContentStore(STORE_DIR)
fetcher = StoreBackedFetcher(
    store,
    timeout=FETCH_TIMEOUT,
    max_bytes=MAX_BYTES,
    allow_private_hosts=ALLOW_PRIVATE_URLS,
)

app = FastAPI(title="Word Counter", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=ALLOW_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class WordCountRequest(BaseModel):
    text: str | None = None
    url: str | None = None


@app.exception_handler(WordCounterError)
async def word_counter_error(request: Request, exc: WordCounterError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/api/health")
def health() -> dict[str, object]:
    return {
        "ok": True,
        "store_dir": str(store.root),
        "fetch_timeout": FETCH_TIMEOUT,
        "max_bytes": MAX_BYTES,
        "allow_private_urls": ALLOW_PRIVATE_URLS,
    }


@app.post("/count/text")
async def count_text(req: WordCountRequest) -> dict[str, object]:
    result = await analyze_request(req.text, req.url, fetcher)
    return result.to_dict()


@app.post("/count/file")
async def count_file(file: UploadFile | None = File(default=None)) -> dict[str, object]:
    result = await analyze_upload(file, fetcher)
    return result.to_dict()
