"""Tests for wren.collection: the Collection wrapper."""

import json

import pytest

from wren.collection import Collection


class TestAccess:
    def test_first_last(self) -> None:
        items = Collection([1, 2, 3])
        assert items.first() == 1
        assert items.last() == 3
        assert Collection().first("none") == "none"

    def test_get(self) -> None:
        items = Collection(["a", "b"])
        assert items.get(1) == "b"
        assert items.get(5, "x") == "x"

    def test_protocol(self) -> None:
        items = Collection([1, 2])
        assert len(items) == 2
        assert items.count() == 2
        assert 2 in items
        assert list(items) == [1, 2]
        assert items[0] == 1
        assert items == Collection([1, 2])
        assert not items.is_empty()
        assert Collection().is_empty()

    def test_all_returns_copy(self) -> None:
        items = Collection([1])
        copy = items.all()
        copy.append(2)
        assert items.all() == [1]

    def test_random(self) -> None:
        assert Collection([7]).random() == 7
        assert Collection().random() is None


class TestTransformations:
    def test_map_filter(self) -> None:
        items = Collection([1, 2, 3, 4]).filter(lambda n: n % 2 == 0).map(lambda n: n * 10)
        assert items.all() == [20, 40]

    def test_filter_without_callback_drops_falsy(self) -> None:
        assert Collection([0, 1, "", "a", None]).filter().all() == [1, "a"]

    def test_reduce(self) -> None:
        assert Collection([1, 2, 3]).reduce(lambda acc, n: acc + n, 0) == 6

    def test_chunk(self) -> None:
        chunks = Collection([1, 2, 3, 4, 5]).chunk(2)
        assert chunks.to_list() == [[1, 2], [3, 4], [5]]

    def test_chunk_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Collection([1]).chunk(0)

    def test_slice(self) -> None:
        items = Collection([1, 2, 3, 4])
        assert items.slice(1, 2).all() == [2, 3]
        assert items.slice(2).all() == [3, 4]

    def test_sort_reverse_unique(self) -> None:
        items = Collection([3, 1, 2, 3])
        assert items.sort().all() == [1, 2, 3, 3]
        assert items.sort(reverse=True).all() == [3, 3, 2, 1]
        assert items.reverse().all() == [3, 2, 1, 3]
        assert items.unique().all() == [3, 1, 2]

    def test_transformations_do_not_mutate(self) -> None:
        items = Collection([2, 1])
        items.sort()
        items.shuffle()
        assert items.all() == [2, 1]


class TestMutation:
    def test_add_append_prepend_remove(self) -> None:
        items = Collection([2]).add(3).append([4, 5]).prepend([0, 1]).remove(0)
        assert items.all() == [1, 2, 3, 4, 5]

    def test_shift_pop(self) -> None:
        items = Collection([1, 2, 3])
        assert items.shift() == 1
        assert items.pop() == 3
        assert items.all() == [2]
        assert Collection().pop() is None


class TestSerialization:
    def test_to_json(self) -> None:
        items = Collection([{"name": "Zoë"}])
        assert json.loads(items.to_json()) == [{"name": "Zoë"}]
        assert "Zoë" in str(items)

    def test_nested_collections_unwrap(self) -> None:
        assert Collection([Collection([1]), 2]).to_list() == [[1], 2]
