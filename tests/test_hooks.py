"""Tests for wren.hooks: filter and action registries."""

import pytest

from wren.hooks import Actions, Filters


class TestFilters:
    def test_no_callbacks_returns_value(self) -> None:
        assert Filters().apply("request.uri", "users") == "users"

    def test_chains_values(self) -> None:
        filters = Filters().add("n", lambda v: v + 1).add("n", lambda v: v * 10)
        assert filters.apply("n", 1) == 20

    def test_priority_order(self) -> None:
        filters = Filters()
        filters.add("n", lambda v: v * 10, priority=20)
        filters.add("n", lambda v: v + 1, priority=5)
        assert filters.apply("n", 1) == 11

    def test_same_priority_keeps_registration_order(self) -> None:
        filters = Filters()
        filters.add("s", lambda v: v + "a")
        filters.add("s", lambda v: v + "b")
        assert filters.apply("s", "") == "ab"

    def test_extra_args_forwarded(self) -> None:
        filters = Filters().add("greet", lambda v, name: f"{v} {name}")
        assert filters.apply("greet", "hello", "bob") == "hello bob"

    def test_has_and_len(self) -> None:
        filters = Filters().add("a", str).add("b", str)
        assert filters.has("a")
        assert not filters.has("c")
        assert len(filters) == 2

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError, match="must be callable"):
            Filters().add("a", "nope")  # type: ignore[arg-type]


class TestActions:
    def test_run_calls_in_priority_order(self) -> None:
        calls: list[str] = []
        actions = Actions()
        actions.add("boot", lambda: calls.append("late"), priority=50)
        actions.add("boot", lambda: calls.append("early"), priority=1)
        actions.run("boot")
        assert calls == ["early", "late"]

    def test_run_returns_results(self) -> None:
        actions = Actions().add("sum", lambda a, b: a + b)
        assert actions.run("sum", 2, 3) == [5]

    def test_run_unknown_name(self) -> None:
        assert Actions().run("nothing") == []
