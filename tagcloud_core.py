"""Core utilities for turning plain text into a tag cloud page.

The pipeline runs strictly forward::

    text -> tokenize -> count -> select_top -> map_sizes -> DocumentRenderer

Every stage takes the previous stage's value and returns a new one; nothing is
cached or shared between runs.
"""
from __future__ import annotations

import collections
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from tagcloud_errors import PreconditionError, ValidationError
from tagcloud_render import DocumentRenderer

logger = logging.getLogger("tagcloud")

DEFAULT_SEPARATORS = " \t\n\r,-.!?[]';:/()"
MIN_SIZE = 10
MAX_SIZE = 48
DEFAULT_TOP_N = 100
MODES: Tuple[str, ...] = ("cloud", "table")
TABLE_HEADER: Tuple[str, str] = ("Word", "Counts")


@dataclass
class TagCloudConfig:
    """Configuration for tag cloud generation."""

    separators: str = DEFAULT_SEPARATORS
    top_n: int = DEFAULT_TOP_N
    min_size: int = MIN_SIZE
    max_size: int = MAX_SIZE
    mode: str = "cloud"
    stylesheet: Optional[str] = None
    title: Optional[str] = None
    encoding: str = "utf-8"

    def validate(self) -> "TagCloudConfig":
        if self.mode not in MODES:
            raise ValidationError(f"Unknown mode {self.mode!r}; expected one of {', '.join(MODES)}")
        if self.mode == "cloud":
            check_top_n(self.top_n)
        check_size_range(self.min_size, self.max_size)
        return self


@dataclass(frozen=True)
class RankedEntry:
    word: str
    count: int


@dataclass(frozen=True)
class SelectionResult:
    """Up to N selected words.

    ``words`` is the display order (alphabetical, case-insensitive);
    ``ranked`` keeps the same words in the popularity order used to pick them.
    """

    words: Tuple[str, ...]
    ranked: Tuple[RankedEntry, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.words)

    def __len__(self) -> int:
        return len(self.words)


@dataclass(frozen=True)
class SizedWord:
    word: str
    count: int
    size: int


@dataclass(frozen=True)
class TagCloud:
    words: Tuple[SizedWord, ...]
    total_tokens: int
    unique_tokens: int
    frequencies: Mapping[str, int] = field(default_factory=dict)


def check_top_n(n: object) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValidationError(f"Number of words must be an integer, got {n!r}")
    if n < 1:
        raise ValidationError("Number of words must be greater than 0")
    return n


def check_size_range(min_size: int, max_size: int) -> None:
    if min_size > max_size:
        raise ValidationError(f"Minimum size {min_size} exceeds maximum size {max_size}")


def alphabetical_key(word: str) -> Tuple[str, str]:
    return (word.lower(), word)


def popularity_key(entry: RankedEntry) -> Tuple[int, str, str]:
    """Count descending, then word ascending ignoring case."""
    return (-entry.count, entry.word.lower(), entry.word)


def separator_pattern(separators: Iterable[str]) -> Optional[re.Pattern]:
    chars = sorted(set(separators))
    if not chars:
        return None
    return re.compile("[" + "".join(re.escape(char) for char in chars) + "]+")


def tokenize(text: str, separators: Iterable[str] = DEFAULT_SEPARATORS) -> List[str]:
    """Split ``text`` on any separator character and lower-case the pieces.

    Runs of separators never produce empty tokens and a trailing word without
    a separator after it is kept. ``separators`` may be any iterable of
    characters, in any order and with repeats.
    """
    if text is None:
        raise PreconditionError("Text to tokenize is required")
    if separators is None:
        raise PreconditionError("Separator set is required")
    pattern = separator_pattern(separators)
    pieces = pattern.split(text) if pattern is not None else [text]
    return [piece.lower() for piece in pieces if piece]


def count(tokens: Iterable[str]) -> Dict[str, int]:
    if tokens is None:
        raise PreconditionError("Token sequence is required")
    return dict(collections.Counter(tokens))


def rank(freq: Mapping[str, int]) -> List[RankedEntry]:
    if freq is None:
        raise PreconditionError("Frequency map is required")
    entries = [RankedEntry(word, int(value)) for word, value in freq.items()]
    return sorted(entries, key=popularity_key)


def select_top(freq: Mapping[str, int], n: int) -> SelectionResult:
    """Pick the ``n`` most frequent words and return them alphabetically.

    On equal counts the alphabetically earlier word ranks higher, so when
    ``n`` cuts through a group of equally frequent words the earliest words
    of that group are the ones kept.
    """
    check_top_n(n)
    ranked = rank(freq)[:n]
    words = sorted((entry.word for entry in ranked), key=alphabetical_key)
    return SelectionResult(words=tuple(words), ranked=tuple(ranked))


def map_sizes(
    selected: Iterable[str],
    freq: Mapping[str, int],
    min_size: int = MIN_SIZE,
    max_size: int = MAX_SIZE,
) -> List[SizedWord]:
    """Linearly map each selected word's count onto ``[min_size, max_size]``.

    The count range is taken over the selected words only. Sizes are truncated
    toward zero and clamped. When every selected word has the same count the
    range is degenerate and each word gets ``min_size``.
    """
    if selected is None or freq is None:
        raise PreconditionError("Selection and frequency map are required")
    check_size_range(min_size, max_size)
    words = list(selected)
    if not words:
        return []
    missing = [word for word in words if word not in freq]
    if missing:
        raise PreconditionError(f"Selected words missing from frequency map: {missing[:5]}")

    counts = np.array([freq[word] for word in words], dtype=np.int64)
    count_min = int(counts.min())
    count_max = int(counts.max())
    if count_max == count_min:
        sizes = np.full(len(words), min_size, dtype=np.int64)
    else:
        scaled = min_size + (max_size - min_size) * (counts - count_min) / (count_max - count_min)
        sizes = np.clip(np.trunc(scaled), min_size, max_size).astype(np.int64)

    logger.debug("Mapped %d words from counts %d..%d", len(words), count_min, count_max)
    return [SizedWord(word=word, count=int(freq[word]), size=int(size)) for word, size in zip(words, sizes)]


def build_tag_cloud(text: str, *, config: TagCloudConfig) -> TagCloud:
    tokens = tokenize(text, config.separators)
    if not tokens:
        raise ValidationError("Text must not be empty of words")
    freq = count(tokens)
    logger.debug("Read %d tokens, %d distinct", len(tokens), len(freq))

    if config.mode == "table":
        words = tuple(SizedWord(word, freq[word], config.min_size) for word in sorted(freq, key=alphabetical_key))
    else:
        selection = select_top(freq, config.top_n)
        logger.debug("Selected %d of %d words", len(selection), len(freq))
        words = tuple(map_sizes(selection, freq, config.min_size, config.max_size))
    return TagCloud(words=words, total_tokens=len(tokens), unique_tokens=len(freq), frequencies=freq)


def load_text(text_path: Path | str, *, encoding: str = "utf-8") -> str:
    path = Path(text_path)
    return path.read_text(encoding=encoding)


def generate_tag_cloud_from_file(path: Path | str, *, config: TagCloudConfig) -> TagCloud:
    text = load_text(path, encoding=config.encoding)
    return build_tag_cloud(text, config=config)


def default_title(input_path: Path | str, config: TagCloudConfig) -> str:
    if config.title:
        return config.title
    if config.mode == "table":
        return f"Words Counted in {input_path}"
    return f"Top {config.top_n} words in {input_path}"


def write_cloud_page(
    renderer: DocumentRenderer,
    words: Sequence[SizedWord],
    *,
    title: str,
    stylesheet: Optional[str] = None,
) -> None:
    renderer.open(title, stylesheet=stylesheet)
    renderer.write_nested(title, "h2")
    renderer.write_rule()
    with renderer.section("div", "cdiv"), renderer.section("p", "cbox"):
        for item in words:
            renderer.write_word(item.word, item.size, item.count)
    renderer.close()


def write_table_page(
    renderer: DocumentRenderer,
    words: Sequence[SizedWord],
    *,
    title: str,
    stylesheet: Optional[str] = None,
) -> None:
    renderer.open(title, stylesheet=stylesheet)
    renderer.write_nested(title, "h2")
    renderer.write_rule()
    renderer.write_table(((item.word, item.count) for item in words), header=TABLE_HEADER)
    renderer.close()


def render_page(renderer: DocumentRenderer, cloud: TagCloud, *, title: str, config: TagCloudConfig) -> None:
    writer = write_table_page if config.mode == "table" else write_cloud_page
    with renderer:
        writer(renderer, cloud.words, title=title, stylesheet=config.stylesheet)


def render_to_path(html_path: Path | str, cloud: TagCloud, *, title: str, config: TagCloudConfig) -> Path:
    path = Path(html_path)
    render_page(DocumentRenderer.for_path(path), cloud, title=title, config=config)
    logger.debug("Wrote %d words to %s", len(cloud.words), path)
    return path


def cloud_to_records(cloud: TagCloud) -> List[Dict[str, object]]:
    return [{"text": item.word, "count": item.count, "size": item.size} for item in cloud.words]
