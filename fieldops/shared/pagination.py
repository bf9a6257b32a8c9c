"""Pagination helpers for list endpoints"""

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def normalize_pagination(page=None, limit=None) -> tuple[int, int, int]:
    """Return (page, limit, offset) with page >= 1 and limit capped at MAX_PAGE_SIZE"""
    page = max(page or 1, 1)
    limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit
