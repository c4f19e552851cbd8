from typing import List, Optional

from django.conf import settings

from apps.api.exceptions import ValidationFailed
from apps.common.pagination import PageSpec, sort_keys_from


def _int_param(raw: Optional[str], name: str, default: int, errors: dict) -> int:
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        errors.setdefault(name, []).append(f"{name} must be an integer.")
        return default


def page_spec_from_query(query_params) -> PageSpec:
    """Build a PageSpec from ``?page=&size=&sort=field,dir`` (sort may repeat).

    Size falls back to CATALOG_DEFAULT_PAGE_SIZE and is capped at
    CATALOG_MAX_PAGE_SIZE.
    """
    default_size = getattr(settings, "CATALOG_DEFAULT_PAGE_SIZE", 12)
    max_size = getattr(settings, "CATALOG_MAX_PAGE_SIZE", 100)
    errors: dict = {}
    page = _int_param(query_params.get("page"), "page", 0, errors)
    size = _int_param(query_params.get("size"), "size", default_size, errors)
    if page < 0:
        errors.setdefault("page", []).append("page must be zero or positive.")
    if size < 1:
        errors.setdefault("size", []).append("size must be positive.")
    raw_sort: List[str] = query_params.getlist("sort")
    try:
        sort = sort_keys_from([value for value in raw_sort if value])
    except ValueError as exc:
        errors.setdefault("sort", []).append(str(exc))
        sort = []
    if errors:
        raise ValidationFailed(errors, message="Invalid pagination parameters")
    return PageSpec(page=page, size=min(size, max_size), sort=tuple(sort))

