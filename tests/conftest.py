"""Shared pytest fixtures for tagcloud tests.

Provides recording output sinks for the renderer, a small sample corpus and
ready-made configurations for both output modes.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Optional

import pytest

from tagcloud_core import TagCloudConfig

SAMPLE_TEXT = """The cat sat on the mat.
The dog sat on the log, and the cat ran!
A bird? A bird -- on the (old) mat.
"""


class RecordingSink(io.StringIO):
    """StringIO that remembers its content and how often it was closed."""

    def __init__(self) -> None:
        super().__init__()
        self.close_calls = 0
        self.final: Optional[str] = None

    def close(self) -> None:
        self.close_calls += 1
        if self.close_calls == 1:
            self.final = self.getvalue()
        super().close()


class FailingSink(RecordingSink):
    """Sink whose writes start failing after ``fail_after`` successful writes."""

    def __init__(self, fail_after: int) -> None:
        super().__init__()
        self.fail_after = fail_after
        self.writes = 0

    def write(self, text: str) -> int:
        if self.writes >= self.fail_after:
            raise OSError("No space left on device")
        self.writes += 1
        return super().write(text)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TEXT


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.txt"
    path.write_text(SAMPLE_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def cloud_config() -> TagCloudConfig:
    """Top five words, default size range."""
    return TagCloudConfig(top_n=5)


@pytest.fixture
def table_config() -> TagCloudConfig:
    return TagCloudConfig(mode="table")


@pytest.fixture
def failing_sink():
    """Factory for sinks that fail after a given number of writes."""
    return FailingSink
