from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from apps.common.validation import parse_id_list


def _parse_price(raw: Any) -> Optional[Decimal]:
    # Unparseable text becomes NaN so the validator reports it as invalid.
    if raw is None or raw == "":
        return None
    if isinstance(raw, Decimal):
        return raw
    try:
        return Decimal(str(raw).strip())
    except InvalidOperation:
        return Decimal("NaN")


@dataclass
class ProductWriteCommand:
    """Write shape for product insert and full-replace update.

    Identifiers are never part of the command: inserts get a store-assigned
    id and updates address the record through the path id.
    ``rejected_category_ids`` keeps the raw entries that were not ids.
    """

    name: str
    description: str
    price: Optional[Decimal]
    img_url: str = ""
    date: Optional[datetime] = None
    category_ids: List[int] = field(default_factory=list)
    rejected_category_ids: List[Any] = field(default_factory=list)

    @staticmethod
    def from_raw(payload: Dict[str, Any]) -> "ProductWriteCommand":
        data = dict(payload or {})
        data.pop("id", None)
        categories = data.get("category_ids")
        if categories is None:
            categories = data.get("categories")
        category_ids, rejected = parse_id_list(categories)
        return ProductWriteCommand(
            name=str(data.get("name") or "").strip(),
            description=str(data.get("description") or "").strip(),
            price=_parse_price(data.get("price")),
            img_url=str(data.get("img_url") or "").strip(),
            date=data.get("date"),
            category_ids=category_ids,
            rejected_category_ids=rejected,
        )
