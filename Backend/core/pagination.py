"""
Offset pagination shared by every list endpoint.

Responses use the envelope ``{"data": [...], "pagination": {...}}``.
"""
from __future__ import annotations

import math

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_pagination(
    query,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
    default_page: int = DEFAULT_PAGE,
) -> tuple[int, int, int]:
    """
    Read ``page`` and ``limit`` from a query mapping.

    Returns (page, limit, skip). Missing, non-numeric or non-positive values fall
    back to the defaults; ``limit`` is clamped to ``max_limit``.
    """
    page = _to_int(query.get("page"), default_page)
    if page < 1:
        page = default_page

    limit = _to_int(query.get("limit"), default_limit)
    if limit < 1:
        limit = default_limit
    if limit > max_limit:
        limit = max_limit

    return page, limit, (page - 1) * limit


def pagination_meta(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
        "nextPage": page + 1 if page < total_pages else None,
        "prevPage": page - 1 if page > 1 else None,
    }


def paginated_response(data: list, pagination: dict) -> dict:
    return {"data": data, "pagination": pagination}


def paginate_queryset(queryset, query, serializer_class, **options) -> dict:
    """Slice a queryset for the requested page and serialize it into the envelope."""
    page, limit, skip = parse_pagination(query, **options)
    total = queryset.count()
    items = serializer_class(queryset[skip:skip + limit], many=True).data
    return paginated_response(items, pagination_meta(page, limit, total))
