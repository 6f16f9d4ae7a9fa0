from task_api.models import MAX_SQLITE_INTEGER
from task_api.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Page, pagination_envelope


class TestPage:
    def test_defaults(self):
        assert Page.from_query() == Page(limit=DEFAULT_PAGE_SIZE, offset=0)

    def test_clamping(self):
        assert Page.from_query("0", "-3") == Page(limit=1, offset=0)
        assert Page.from_query("501", "7") == Page(limit=MAX_PAGE_SIZE, offset=7)
        assert Page.from_query(25, 5) == Page(limit=25, offset=5)
        assert Page.from_query("0", str(10 ** 20)) == Page(limit=1, offset=MAX_SQLITE_INTEGER)

    def test_non_numeric_falls_back_to_defaults(self):
        assert Page.from_query("ten", "1.5") == Page(limit=DEFAULT_PAGE_SIZE, offset=0)


def test_pagination_envelope_shape():
    envelope = pagination_envelope(iter([{"id": 1}]), 9, Page(limit=1, offset=3))
    assert envelope == {"data": [{"id": 1}], "meta": {"total": 9, "limit": 1, "offset": 3}}
