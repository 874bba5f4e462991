from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from .errors import WordCounterError
from .fetcher import StoreBackedFetcher
from .logs import configure_logging
from .models import AnalysisResult, LocalUpload
from .pipeline import analyze_request, analyze_upload
from .store import ContentStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Word length statistics for text, a URL or a file")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Text to analyze.")
    source.add_argument("--url", help="URL to download and analyze.")
    source.add_argument("--file", type=Path, help="Local file to analyze.")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON.")
    parser.add_argument("--data-dir", default=os.getenv("WC_DATA_DIR", ".wc_data"))
    parser.add_argument("--timeout", type=float, default=float(os.getenv("WC_FETCH_TIMEOUT", "30")))
    parser.add_argument("--max-bytes", type=int, default=int(os.getenv("WC_MAX_BYTES", str(40 * 1024 * 1024))))
    parser.add_argument(
        "--allow-private-urls",
        action="store_true",
        default=os.getenv("WC_ALLOW_PRIVATE_URLS", "0").lower() in {"1", "true", "yes"},
    )
    parser.add_argument("--log-level", default=os.getenv("WC_LOG_LEVEL", "WARNING"))
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    fetcher = StoreBackedFetcher(
        ContentStore(Path(args.data_dir) / "store"),
        timeout=args.timeout,
        max_bytes=args.max_bytes,
        allow_private_hosts=args.allow_private_urls,
    )

    try:
        if args.file is not None:
            if not args.file.is_file():
                print(f"error: no such file: {args.file}", file=sys.stderr)
                return 1
            result = asyncio.run(analyze_upload(LocalUpload(args.file), fetcher))
        else:
            result = asyncio.run(analyze_request(args.text, args.url, fetcher))
    except WordCounterError as exc:
        print(f"error[{exc.kind}]: {exc.detail}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(render_report(result))
    return 0


def render_report(result: AnalysisResult) -> str:
    lines = []
    if result.source_url:
        lines.append(f"url: {result.source_url}")
    lines.append(f"words: {result.word_count}")
    lines.append(f"average_word_length: {result.average_word_length:.3f}")
    for length, count in result.grouped_counts.items():
        lines.append(f"  {length:>3}: {count}")
    rendered_top = ", ".join(f"{length}({count})" for length, count in result.most_frequent_lengths)
    lines.append(f"most_frequent_lengths: {rendered_top}")
    return "\n".join(lines)


if __name__ == "__main__":
    sys.exit(main())
