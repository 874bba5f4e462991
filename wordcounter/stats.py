from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from .errors import EmptyTextFailure


@dataclass(frozen=True)
class WordStats:
    grouped_counts: Mapping[int, int]
    word_count: int
    average_word_length: float
    most_frequent_lengths: tuple[tuple[int, int], ...]


def tally_lengths(words: Iterable[str]) -> dict[int, int]:
    """Count words per length, keyed in ascending length order."""
    counts = Counter(len(word) for word in words if word)
    return dict(sorted(counts.items()))


def most_frequent(tally: Mapping[int, int]) -> tuple[tuple[int, int], ...]:
    if not tally:
        return ()
    top = max(tally.values())
    return tuple((length, count) for length, count in tally.items() if count == top)


def analyze_words(words: Iterable[str]) -> WordStats:
    tally = tally_lengths(words)
    word_count = sum(tally.values())
    if word_count == 0:
        raise EmptyTextFailure("Text contains no words to count")

    total_chars = sum(length * count for length, count in tally.items())
    return WordStats(
        grouped_counts=MappingProxyType(tally),
        word_count=word_count,
        average_word_length=total_chars / word_count,
        most_frequent_lengths=most_frequent(tally),
    )
