from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Protocol, Union


class UploadHandle(Protocol):
    """Anything shaped like FastAPI's ``UploadFile``."""

    filename: str | None

    async def read(self) -> bytes: ...


@dataclass
class LocalUpload:
    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    async def read(self) -> bytes:
        return await asyncio.to_thread(self.path.read_bytes)


@dataclass(frozen=True)
class Inline:
    text: str


@dataclass(frozen=True)
class Remote:
    url: str


@dataclass(frozen=True)
class Uploaded:
    handle: Any = field(compare=False)


TextSource = Union[Inline, Remote, Uploaded]


@dataclass(frozen=True)
class ResolvedText:
    source: TextSource
    text: str

    @property
    def source_url(self) -> str | None:
        if isinstance(self.source, Remote):
            return self.source.url
        return None


@dataclass(frozen=True)
class AnalysisResult:
    source_text: str
    word_count: int
    average_word_length: float
    grouped_counts: Mapping[int, int]
    most_frequent_lengths: tuple[tuple[int, int], ...]
    source_url: str | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "text": self.source_text,
            "url": self.source_url,
            "word_count": self.word_count,
            "average_word_length": self.average_word_length,
            "grouped_counts": {str(length): count for length, count in self.grouped_counts.items()},
            "most_frequent_lengths": [
                {"length": length, "count": count} for length, count in self.most_frequent_lengths
            ],
            "error_message": self.error_message,
        }
