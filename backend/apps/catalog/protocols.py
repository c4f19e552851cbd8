from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from apps.catalog.models import Category, Product
    from apps.common.pagination import Page, PageSpec
    from apps.common.repository import DeleteOutcome


class CategoryRepositoryProtocol(Protocol):
    sortable_fields: Dict[str, str]

    def list(self, **filters) -> Iterable["Category"]: ...

    def get_by_id(self, pk) -> Optional["Category"]: ...

    def scan_paged(self, page_spec: "PageSpec") -> "Page": ...


class ProductRepositoryProtocol(Protocol):
    sortable_fields: Dict[str, str]

    def scan_paged(self, page_spec: "PageSpec") -> "Page": ...

    def scan_filtered(
        self, page_spec: "PageSpec", category_id: Optional[int], name: Optional[str]
    ) -> "Page": ...

    def get_by_id(self, pk) -> Optional["Product"]: ...

    def get_category_by_id(self, pk) -> Optional["Category"]: ...

    def insert(
        self, product: "Product", categories: Sequence["Category"]
    ) -> "Product": ...

    def replace(
        self, product: "Product", categories: Sequence["Category"]
    ) -> Optional["Product"]: ...

    def delete_by_id(self, pk) -> "DeleteOutcome": ...

    def count(self) -> int: ...
