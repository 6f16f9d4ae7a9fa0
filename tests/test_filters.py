import pytest

from task_api.errors import InvalidInputError
from task_api.filters import (
    OVERDUE_CLAUSE,
    FilterShape,
    TaskFilter,
    compile_filter,
    predicate_for,
)


class TestCompileFilter:
    def test_no_filters_is_owner_only(self):
        compiled = compile_filter(TaskFilter())
        assert compiled.shape == FilterShape()
        assert compiled.values == ()
        assert compiled.count_params("u1") == ("u1",)
        assert compiled.list_params("u1", 50, 0) == ("u1", 50, 0)

    def test_values_follow_toggle_order(self):
        compiled = compile_filter(
            TaskFilter(due_after="2021-01-01", status="done", priority="high", due_before="2030-01-01")
        )
        assert compiled.shape == FilterShape(True, True, True, True, False)
        assert compiled.values == ("done", "high", "2030-01-01", "2021-01-01")
        assert compiled.count_params("u1") == ("u1", "done", "high", "2030-01-01", "2021-01-01")

    def test_overdue_alone_binds_owner_once(self):
        compiled = compile_filter(TaskFilter(include_overdue=True))
        assert compiled.shape == FilterShape(include_overdue=True)
        assert compiled.count_params("u1") == ("u1",)

    def test_union_binds_owner_in_both_branches(self):
        compiled = compile_filter(TaskFilter(status="todo", include_overdue=True))
        assert compiled.count_params("u1") == ("u1", "todo", "u1")
        assert compiled.list_params("u1", 10, 20) == ("u1", "todo", "u1", 10, 20)

    def test_shape_ignores_values(self):
        a = compile_filter(TaskFilter(status="todo", due_before="2020-01-01"))
        b = compile_filter(TaskFilter(status="done", due_before="2099-12-31T23:59:59Z"))
        assert a.shape == b.shape
        assert a.values != b.values

    @pytest.mark.parametrize(
        "options, message",
        [
            (TaskFilter(status="blocked"), "Invalid status"),
            (TaskFilter(status=""), "Invalid status"),
            (TaskFilter(priority="critical"), "Invalid priority"),
            (TaskFilter(due_before="01/01/2020"), "due_before"),
            (TaskFilter(due_after="2020-01-01T10:00:00"), "due_after"),
            (TaskFilter(due_after="2020-02-30"), "due_after"),
            (TaskFilter(due_before="2020-01-01\n"), "due_before"),
            (TaskFilter(due_after="2020-01-01T10:00:00Z\n"), "due_after"),
        ],
    )
    def test_invalid_options_fail(self, options, message):
        with pytest.raises(InvalidInputError) as exc_info:
            compile_filter(options)
        assert message in exc_info.value.detail


class TestPredicateFor:
    def test_owner_only(self):
        predicate = predicate_for(FilterShape())
        assert not predicate.is_union
        assert predicate.where == "user_id = ?"

    def test_filters_are_conjoined_with_owner(self):
        predicate = predicate_for(FilterShape(status=True, due_after=True))
        assert predicate.where == "user_id = ? AND status = ? AND due_date > ?"
        assert predicate.overdue_where is None

    def test_overdue_only(self):
        predicate = predicate_for(FilterShape(include_overdue=True))
        assert not predicate.is_union
        assert predicate.where == f"user_id = ? AND {OVERDUE_CLAUSE}"

    def test_filters_with_overdue_are_two_owner_scoped_branches(self):
        predicate = predicate_for(FilterShape(priority=True, include_overdue=True))
        assert predicate.is_union
        assert predicate.filter_where == "user_id = ? AND priority = ?"
        assert predicate.overdue_where.startswith("user_id = ? AND ")
