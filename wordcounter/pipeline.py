from __future__ import annotations

import enum
from typing import Callable

from loguru import logger

from .errors import ProcessingFailure, WordCounterError
from .fetcher import ContentFetcher
from .models import AnalysisResult, ResolvedText, TextSource, UploadHandle
from .resolver import needs_fetch, resolve, source_from_request, source_from_upload
from .stats import analyze_words
from .tokenizer import tokenize


class PipelineState(str, enum.Enum):
    CREATED = "created"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    TOKENIZING = "tokenizing"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.CREATED: {PipelineState.RESOLVING},
    PipelineState.RESOLVING: {PipelineState.FETCHING, PipelineState.TOKENIZING},
    PipelineState.FETCHING: {PipelineState.TOKENIZING},
    PipelineState.TOKENIZING: {PipelineState.AGGREGATING},
    PipelineState.AGGREGATING: {PipelineState.COMPLETED},
    PipelineState.COMPLETED: set(),
    PipelineState.FAILED: set(),
}


class PipelineRun:
    """State of a single request moving through resolve, fetch, tokenize and aggregate."""

    def __init__(self) -> None:
        self.state = PipelineState.CREATED
        self.history: list[PipelineState] = [self.state]
        self.failure_kind: str | None = None

    @property
    def finished(self) -> bool:
        return self.state in {PipelineState.COMPLETED, PipelineState.FAILED}

    def advance(self, state: PipelineState) -> None:
        allowed = _TRANSITIONS[self.state]
        if state is PipelineState.FAILED and not self.finished:
            allowed = {PipelineState.FAILED}
        if state not in allowed:
            raise ProcessingFailure(f"Illegal pipeline transition {self.state.value} -> {state.value}")
        logger.debug("Pipeline {} -> {}", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def fail(self, error: WordCounterError) -> None:
        self.failure_kind = error.kind
        if not self.finished:
            self.advance(PipelineState.FAILED)


def build_result(resolved: ResolvedText, run: PipelineRun | None = None) -> AnalysisResult:
    if run is None:
        run = PipelineRun()
        run.advance(PipelineState.RESOLVING)
    run.advance(PipelineState.TOKENIZING)
    words = tokenize(resolved.text)

    run.advance(PipelineState.AGGREGATING)
    stats = analyze_words(words)

    result = AnalysisResult(
        source_text=resolved.text,
        source_url=resolved.source_url,
        word_count=stats.word_count,
        average_word_length=stats.average_word_length,
        grouped_counts=stats.grouped_counts,
        most_frequent_lengths=stats.most_frequent_lengths,
    )
    run.advance(PipelineState.COMPLETED)
    return result


async def analyze_request(
    text: str | None,
    url: str | None,
    fetcher: ContentFetcher,
    run: PipelineRun | None = None,
) -> AnalysisResult:
    run = run or PipelineRun()
    return await _drive(run, lambda: source_from_request(text, url), fetcher)


async def analyze_upload(
    handle: UploadHandle | None,
    fetcher: ContentFetcher,
    run: PipelineRun | None = None,
) -> AnalysisResult:
    run = run or PipelineRun()
    return await _drive(run, lambda: source_from_upload(handle), fetcher)


async def _drive(
    run: PipelineRun,
    select: Callable[[], TextSource],
    fetcher: ContentFetcher,
) -> AnalysisResult:
    try:
        run.advance(PipelineState.RESOLVING)
        source: TextSource = select()
        if needs_fetch(source):
            run.advance(PipelineState.FETCHING)
        resolved = await resolve(source, fetcher)
        result = build_result(resolved, run)
    except WordCounterError as exc:
        run.fail(exc)
        logger.warning("Request failed ({}): {}", exc.kind, exc.detail)
        raise
    except Exception as exc:
        error = ProcessingFailure("Failed to process request", exc)
        run.fail(error)
        logger.exception("Unexpected failure while processing request")
        raise error from exc

    logger.info(
        "Counted {} words (mean length {:.3f}) from {}",
        result.word_count,
        result.average_word_length,
        result.source_url or type(source).__name__.lower(),
    )
    return result

