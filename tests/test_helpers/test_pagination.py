"""Tests for the pagination helpers and response envelope."""

import pytest

from helpers.pagination import build_pagination, total_pages
from helpers.responses import api_response, error_body


class TestPagination:
    @pytest.mark.parametrize(
        "total, limit, expected", [(0, 10, 0), (10, 10, 1), (11, 10, 2), (5, 0, 0)]
    )
    def test_total_pages(self, total, limit, expected):
        assert total_pages(total, limit) == expected

    def test_middle_page(self):
        assert build_pagination(2, 10, 25, "totalQuestions") == {
            "currentPage": 2,
            "totalPages": 3,
            "totalQuestions": 25,
            "hasNextPage": True,
            "hasPrevPage": True,
        }

    def test_page_past_the_end(self):
        block = build_pagination(5, 10, 12, "totalUsers")

        assert block["hasNextPage"] is False
        assert block["hasPrevPage"] is True


class TestEnvelope:
    def test_minimal_success(self):
        assert api_response() == {"success": True}

    def test_success_with_data_and_message(self):
        assert api_response({"id": 1}, "Created") == {
            "success": True,
            "message": "Created",
            "data": {"id": 1},
        }

    def test_falsy_data_is_kept(self):
        assert api_response([]) == {"success": True, "data": []}

    def test_error_body(self):
        assert error_body("Nope", "abc12345", stack="trace") == {
            "success": False,
            "message": "Nope",
            "correlationId": "abc12345",
            "stack": "trace",
        }
