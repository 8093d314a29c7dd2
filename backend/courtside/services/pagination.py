from __future__ import annotations

MAX_PAGE_SIZE = 100


def clamp_page(page: int | None, limit: int | None, default_limit: int = 20) -> tuple[int, int]:
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else default_limit
    return page, min(limit, MAX_PAGE_SIZE)


def paginate(query, page: int, limit: int):
    """Returns (rows, total) for an already ordered query."""
    page, limit = clamp_page(page, limit)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, total


def page_meta(page: int, limit: int, total: int) -> dict:
    page, limit = clamp_page(page, limit)
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": (total + limit - 1) // limit if total else 0,
    }
