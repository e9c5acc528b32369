import pytest

from blogsmith.core.pagination import PaginationResult, page_offset


class TestPaginationResult:
    @pytest.mark.parametrize(("total", "limit", "pages"), [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (45, 20, 3)])
    def test_total_pages(self, total, limit, pages):
        assert PaginationResult[int](items=[], total=total, page=1, limit=limit).total_pages == pages

    def test_serialized_fields(self):
        result = PaginationResult[str](items=["a", "b"], total=5, page=1, limit=2)
        assert result.model_dump() == {"items": ["a", "b"], "total": 5, "page": 1, "limit": 2, "total_pages": 3}

    def test_page_must_be_positive(self):
        with pytest.raises(ValueError):
            PaginationResult[int](items=[], total=0, page=0, limit=10)


class TestPageOffset:
    def test_offsets(self):
        assert page_offset(1, 20) == 0
        assert page_offset(3, 20) == 40
