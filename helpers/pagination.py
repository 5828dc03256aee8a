"""
Page/limit query parameters and the pagination block returned by list endpoints.
"""

import math
from typing import Annotated

from fastapi import Query

PageParam = Annotated[int, Query(ge=1, description="1-based page number")]
LimitParam = Annotated[
    int, Query(ge=1, le=100, description="Maximum number of records to return")
]


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def build_pagination(page: int, limit: int, total: int, total_key: str) -> dict:
    """
    Build the pagination block of a list response.

    Args:
        page: Current 1-based page
        limit: Page size
        total: Total matching records
        total_key: Name of the total field (e.g. ``totalQuestions``)

    Returns:
        Dict with currentPage, totalPages, the total and next/prev flags
    """
    pages = total_pages(total, limit)
    return {
        "currentPage": page,
        "totalPages": pages,
        total_key: total,
        "hasNextPage": page < pages,
        "hasPrevPage": page > 1,
    }
