import pytest

from task_api.errors import InvalidInputError
from task_api.updates import build_update


class TestBuildUpdate:
    def test_only_present_keys_are_assigned(self):
        plan = build_update({"status": "done"})
        assert plan.columns == ("status",)
        assert plan.values == ("done",)

    def test_null_is_kept_as_an_assignment(self):
        plan = build_update({"description": None, "due_date": None})
        assert plan.columns == ("description", "due_date")
        assert plan.values == (None, None)

    def test_columns_have_a_fixed_order(self):
        a = build_update({"priority": "low", "title": "x"})
        b = build_update({"title": "y", "priority": "high"})
        assert a.columns == b.columns == ("title", "priority")

    def test_title_is_trimmed(self):
        assert build_update({"title": "  Hello  "}).values == ("Hello",)

    def test_unknown_keys_are_ignored(self):
        plan = build_update({"title": "x", "user_id": "mallory", "id": 7, "created_at": "2000-01-01"})
        assert plan.columns == ("title",)

    @pytest.mark.parametrize(
        "document, message",
        [
            ({}, "No fields to update"),
            ({"owner": "x"}, "No fields to update"),
            ({"title": "   "}, "title cannot be empty"),
            ({"title": None}, "title cannot be empty"),
            ({"title": 5}, "title must be a string"),
            ({"status": None}, "Invalid status"),
            ({"priority": "critical"}, "Invalid priority"),
            ({"due_date": "next week"}, "due_date"),
            ({"due_date": "2020-01-01\n"}, "due_date"),
            ({"description": 42}, "description must be a string or null"),
            ({"title": "fine", "status": "nope"}, "Invalid status"),
        ],
    )
    def test_invalid_documents_fail(self, document, message):
        with pytest.raises(InvalidInputError) as exc_info:
            build_update(document)
        assert message in exc_info.value.detail

    def test_non_mapping_is_rejected(self):
        with pytest.raises(InvalidInputError):
            build_update(["title"])  # type: ignore[arg-type]
