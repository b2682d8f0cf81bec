"""Tests for the widget cache, sort order, cursor and eviction."""

from grmon.row_store import EVICT_AFTER, RowStore, SortKey
from tests.harness import SCENARIO_PAIRS, make_record, make_sample


def _ids(store):
    return [w.id for w in store.rows]


def _store_with(*pairs):
    store = RowStore()
    store.reconcile(make_sample(*pairs).records)
    return store


class TestSortOrder:
    def test_by_id_is_numeric_ascending(self):
        store = _store_with(*SCENARIO_PAIRS)
        assert store.sort_key is SortKey.BY_ID
        assert _ids(store) == [3, 5, 9]

    def test_by_state_is_lexicographic(self):
        store = _store_with(*SCENARIO_PAIRS)
        store.toggle_sort()
        assert store.sort_key is SortKey.BY_STATE
        assert _ids(store) == [9, 5, 3]

    def test_toggle_twice_restores_order(self):
        store = _store_with((20, "b"), (4, "a"), (11, "b"), (2, "c"))
        before = _ids(store)
        store.toggle_sort()
        store.toggle_sort()
        assert _ids(store) == before

    def test_state_ties_break_by_id(self):
        store = _store_with((40, "select"), (2, "select"), (17, "running"), (9, "select"))
        store.set_sort_key(SortKey.BY_STATE)
        assert _ids(store) == [17, 2, 9, 40]

    def test_reconcile_keeps_active_sort_key(self):
        store = RowStore(sort_key=SortKey.BY_STATE)
        store.reconcile(make_sample(*SCENARIO_PAIRS).records)
        assert _ids(store) == [9, 5, 3]

    def test_rows_are_exactly_the_ids_in_the_sample(self):
        store = _store_with((1, "a"), (2, "a"), (3, "a"))
        store.reconcile(make_sample((2, "a"), (4, "a")).records)
        assert _ids(store) == [2, 4]


class TestCursor:
    def test_empty_grid_cursor_is_zero(self):
        store = RowStore()
        assert store.cursor_index == 0
        assert store.current() is None
        assert store.cursor_up() is False
        assert store.cursor_down() is False
        assert store.cursor_index == 0

    def test_moves_are_clamped(self):
        store = _store_with(*SCENARIO_PAIRS)
        assert store.cursor_up() is False
        assert store.cursor_down() is True
        assert store.cursor_down() is True
        assert store.cursor_index == 2
        assert store.cursor_down() is False
        assert store.cursor_index == 2
        assert store.cursor_up() is True
        assert store.cursor_index == 1

    def test_cursor_follows_widget_across_resort(self):
        store = _store_with(*SCENARIO_PAIRS)
        store.cursor_down()  # id 5
        store.toggle_sort()
        assert store.current().id == 5

    def test_cursor_clamped_when_rows_shrink(self):
        store = _store_with((1, "a"), (2, "a"), (3, "a"))
        store.cursor_down()
        store.cursor_down()
        store.reconcile(make_sample((7, "a")).records)
        assert store.cursor_index == 0
        assert store.current().id == 7

    def test_cursor_reset_when_rows_empty(self):
        store = _store_with((1, "a"), (2, "a"))
        store.cursor_down()
        store.reconcile([])
        assert store.cursor_index == 0
        assert store.rows == []


class TestWidgetIdentity:
    def test_expanded_survives_refresh(self):
        store = _store_with((1, "running"), (2, "select"))
        store.cursor_down()
        assert store.toggle_show_trace() is True
        widget = store.cached(2)
        store.reconcile(make_sample((2, "chan receive"), (3, "running")).records)
        assert store.cached(2) is widget
        assert widget.expanded is True
        assert widget.state == "chan receive"

    def test_update_refreshes_description_and_trace(self):
        store = RowStore()
        store.reconcile([make_record(1, frames=("a()  /a.go:1",))])
        store.reconcile([make_record(1, frames=("b()  /b.go:2", "c()  /c.go:3"))])
        widget = store.cached(1)
        assert widget.description == "b()  /b.go:2"
        assert widget.trace_lines == ["b()  /b.go:2", "c()  /c.go:3"]

    def test_toggle_show_trace_on_empty_grid(self):
        assert RowStore().toggle_show_trace() is False

    def test_duplicate_ids_last_wins(self):
        store = RowStore()
        store.reconcile([make_record(1, "a"), make_record(1, "b")])
        assert _ids(store) == [1]
        assert store.rows[0].state == "b"


class TestEviction:
    def test_absent_widget_stays_cached_until_threshold(self):
        store = _store_with((7, "running"), (1, "running"))
        for _ in range(EVICT_AFTER - 1):
            store.reconcile(make_sample((1, "running")).records)
        assert store.cached(7) is not None
        assert 7 not in _ids(store)

    def test_reappearance_after_eviction_is_fresh(self):
        store = _store_with((7, "running"))
        store.toggle_show_trace()
        assert store.cached(7).expanded is True

        for _ in range(3):
            store.reconcile(make_sample((1, "running")).records)
        assert store.cached(7) is None

        store.reconcile(make_sample((7, "running")).records)
        assert store.cached(7).expanded is False

    def test_reappearance_before_eviction_keeps_state(self):
        store = _store_with((7, "running"))
        store.toggle_show_trace()
        store.reconcile([])
        store.reconcile([])
        store.reconcile(make_sample((7, "running")).records)
        assert store.cached(7).expanded is True
        assert store.cached(7).missed == 0

    def test_cache_size_bounded(self):
        store = RowStore()
        for unit_id in range(10):
            store.reconcile(make_sample((unit_id, "running")).records)
        assert store.cache_size() == EVICT_AFTER
