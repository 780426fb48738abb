"""Tests for tagcloud_core.map_sizes.

Covers:
- Linear interpolation with truncation toward zero
- Count range taken over the selection only
- Degenerate range (all counts equal) maps every word to min_size
- Sizes always inside [min_size, max_size]
- Invalid ranges and absent inputs
"""

from __future__ import annotations

import pytest

from tagcloud_core import MAX_SIZE, MIN_SIZE, SizedWord, map_sizes, select_top
from tagcloud_errors import PreconditionError, ValidationError


class TestInterpolation:
    def test_linear_mapping(self) -> None:
        freq = {"a": 3, "b": 2, "c": 1}
        sized = map_sizes(["a", "b", "c"], freq, 10, 48)
        assert sized == [SizedWord("a", 3, 48), SizedWord("b", 2, 29), SizedWord("c", 1, 10)]

    def test_truncates_toward_zero(self) -> None:
        freq = {"low": 1, "mid": 2, "high": 4}
        sizes = {item.word: item.size for item in map_sizes(["high", "low", "mid"], freq, 10, 48)}
        # 10 + 38 * 1/3 = 22.67
        assert sizes == {"low": 10, "mid": 22, "high": 48}

    def test_range_uses_selected_words_only(self) -> None:
        freq = {"a": 100, "b": 3, "c": 2, "d": 1}
        sized = map_sizes(["b", "c"], freq, 10, 48)
        assert [item.size for item in sized] == [48, 10]

    def test_preserves_selection_order(self) -> None:
        freq = {"zebra": 5, "apple": 1, "mango": 3}
        selection = select_top(freq, 3)
        assert [item.word for item in map_sizes(selection, freq)] == ["apple", "mango", "zebra"]

    def test_sizes_are_plain_ints(self) -> None:
        sized = map_sizes(["a", "b"], {"a": 1, "b": 7})
        assert all(type(item.size) is int and type(item.count) is int for item in sized)

    def test_all_sizes_within_bounds(self) -> None:
        freq = {f"w{i}": (i * 7) % 23 + 1 for i in range(40)}
        for low, high in ((10, 48), (1, 7), (5, 5), (0, 100)):
            for item in map_sizes(sorted(freq), freq, low, high):
                assert low <= item.size <= high


class TestDegenerateRange:
    def test_equal_counts_map_to_min_size(self) -> None:
        freq = {"x": 5, "y": 5, "z": 5}
        sized = map_sizes(["x", "y", "z"], freq, 10, 48)
        assert [item.size for item in sized] == [10, 10, 10]

    def test_single_word_maps_to_min_size(self) -> None:
        assert map_sizes(["only"], {"only": 9}) == [SizedWord("only", 9, MIN_SIZE)]

    def test_selection_of_ties_from_larger_vocabulary(self) -> None:
        freq = {"a": 2, "b": 2, "c": 7}
        sized = map_sizes(["a", "b"], freq, 12, 40)
        assert {item.size for item in sized} == {12}


class TestInvalidInput:
    def test_empty_selection(self) -> None:
        assert map_sizes([], {"a": 1}) == []

    def test_min_above_max_raises(self) -> None:
        with pytest.raises(ValidationError):
            map_sizes(["a"], {"a": 1}, MAX_SIZE, MIN_SIZE)

    def test_word_missing_from_map_raises(self) -> None:
        with pytest.raises(PreconditionError):
            map_sizes(["a", "ghost"], {"a": 1})

    def test_missing_inputs_raise(self) -> None:
        with pytest.raises(PreconditionError):
            map_sizes(None, {"a": 1})  # type: ignore[arg-type]
        with pytest.raises(PreconditionError):
            map_sizes(["a"], None)  # type: ignore[arg-type]
