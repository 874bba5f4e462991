from __future__ import annotations

import re

# Apostrophes are not delimiters, so "brother's" stays one word.
DELIMITERS = "(){}[]¬!*+-_=|~\\^<>.?;:\""

_SPLIT_RE = re.compile("[" + re.escape(DELIMITERS) + r"\s]+")


def tokenize(text: str) -> list[str]:
    return [word for word in _SPLIT_RE.split(text.strip()) if word]
