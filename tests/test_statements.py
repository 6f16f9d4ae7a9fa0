import itertools
from concurrent.futures import ThreadPoolExecutor

from task_api.filters import FilterShape, TaskFilter, compile_filter
from task_api.statements import MAX_STATEMENT_SHAPES, StatementCache, build_update_sql

ALL_SHAPES = [FilterShape(*flags) for flags in itertools.product([False, True], repeat=5)]


class TestStatementCache:
    def test_same_shape_returns_same_text(self):
        cache = StatementCache()
        first = cache.list_statement(compile_filter(TaskFilter(status="todo")).shape)
        second = cache.list_statement(compile_filter(TaskFilter(status="done")).shape)
        assert first is second
        assert len(cache) == 1

    def test_list_and_count_are_separate_entries(self):
        cache = StatementCache()
        shape = FilterShape(status=True)
        assert cache.list_statement(shape) != cache.count_statement(shape)
        assert len(cache) == 2

    def test_cache_converges_to_shape_count(self):
        cache = StatementCache()
        for _ in range(3):
            for shape in ALL_SHAPES:
                cache.list_statement(shape)
                cache.count_statement(shape)
        assert len(cache) == 64
        assert len(cache) <= MAX_STATEMENT_SHAPES

    def test_union_shapes_use_union(self):
        cache = StatementCache()
        union_sql = cache.list_statement(FilterShape(status=True, include_overdue=True))
        plain_sql = cache.list_statement(FilterShape(include_overdue=True))
        assert " UNION " in union_sql
        assert " UNION " not in plain_sql
        assert union_sql.count("user_id = ?") == 2
        assert "COUNT(*)" in cache.count_statement(FilterShape(status=True, include_overdue=True))

    def test_every_statement_is_owner_scoped(self):
        cache = StatementCache()
        for shape in ALL_SHAPES:
            assert "user_id = ?" in cache.list_statement(shape)
            assert "user_id = ?" in cache.count_statement(shape)

    def test_update_statements_keyed_by_columns(self):
        cache = StatementCache()
        a = cache.update_statement(("title", "status"))
        b = cache.update_statement(("title", "status"))
        c = cache.update_statement(("title",))
        assert a is b
        assert a != c
        assert len(cache) == 2

    def test_concurrent_lookups_agree(self):
        cache = StatementCache()
        shape = FilterShape(priority=True, due_before=True)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: cache.list_statement(shape), range(64)))
        assert len(set(results)) == 1
        assert len(cache) == 1


class TestBuildUpdateSql:
    def test_assigns_updated_at_once_and_scopes_by_owner(self):
        sql = build_update_sql(("description", "due_date"))
        assert sql.startswith("UPDATE tasks SET description = ?, due_date = ?, updated_at = ")
        assert sql.count("updated_at =") == 1
        assert "WHERE id = ? AND user_id = ?" in sql
        assert "RETURNING" in sql
