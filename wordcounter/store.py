from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import Iterable


class ContentStore:
    """Append-only blob directory. Every save gets a fresh, unique file name."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _new_path(self, name_hint: str | None) -> Path:
        return self.root / f"{uuid.uuid4().hex}_{sanitize_filename(name_hint or '')}"

    def save_bytes(self, data: bytes, name_hint: str | None = None) -> Path:
        path = self._new_path(name_hint)
        path.write_bytes(data)
        return path

    def save_stream(self, chunks: Iterable[bytes], name_hint: str | None = None, max_bytes: int | None = None) -> Path:
        path = self._new_path(name_hint)
        total = 0
        try:
            with path.open("wb") as f:
                for chunk in chunks:
                    if not chunk:
                        continue
                    total += len(chunk)
                    if max_bytes is not None and total > max_bytes:
                        raise ValueError(f"Download too large: {total} bytes exceeds {max_bytes}")
                    f.write(chunk)
        except Exception:
            path.unlink(missing_ok=True)
            raise
        return path

    def read_bytes(self, path: Path) -> bytes:
        path = Path(path).resolve()
        if path.parent != self.root:
            raise ValueError(f"Path is outside the content store: {path}")
        return path.read_bytes()


def sanitize_filename(name: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", Path(name).name).strip("._")
    return safe or "content.bin"
