from apps.api.exceptions import ValidationFailed


def category_filter_from_query(query_params) -> int:
    """``?categoryId=`` (or ``category_id``); 0 means no category filter."""
    raw = query_params.get("categoryId") or query_params.get("category_id")
    if raw in (None, ""):
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationFailed({"categoryId": ["categoryId must be an integer."]}) from None
