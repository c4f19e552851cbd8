from typing import Optional, Sequence

from django.db import transaction
from django.db.models import Prefetch

from apps.common.pagination import Page, PageSpec
from apps.common.repository import GenericRepository, paginate

from .mappers import PRODUCT_SCALAR_FIELDS
from .models import Category, Product, ProductCategory


class CategoryRepository(GenericRepository[Category]):
    sortable_fields = {"id": "id", "name": "name"}

    def __init__(self):
        super().__init__(Category)

    def list(self, **filters):  # type: ignore[override]
        return self.model.objects.filter(**filters).order_by("name", "id")


class ProductRepository(GenericRepository[Product]):
    sortable_fields = {
        "id": "id",
        "name": "name",
        "price": "price",
        "date": "date",
    }

    def __init__(self):
        super().__init__(Product)
        self.categories = CategoryRepository()

    def _base_queryset(self):
        """Products with their category links prefetched in attachment order."""
        links = ProductCategory.objects.select_related("category").order_by("id")
        return self.model.objects.prefetch_related(
            Prefetch("category_links", queryset=links)
        )

    def scan_filtered(
        self,
        page_spec: PageSpec,
        category_id: Optional[int] = None,
        name: Optional[str] = None,
    ) -> Page:
        queryset = self._base_queryset()
        if category_id:
            # (product, category) is unique, so this join cannot duplicate rows.
            queryset = queryset.filter(category_links__category_id=category_id)
        if name and name.strip():
            queryset = queryset.filter(name__icontains=name.strip())
        return paginate(self.ordered(queryset, page_spec.sort), page_spec)

    def get_category_by_id(self, pk) -> Optional[Category]:
        return self.categories.get_by_id(pk)

    def _attach(self, product: Product, categories: Sequence[Category]) -> None:
        ProductCategory.objects.bulk_create(
            [ProductCategory(product=product, category=c) for c in categories]
        )

    def insert(self, product: Product, categories: Sequence[Category]) -> Product:
        with transaction.atomic():
            product.save(force_insert=True)
            self._attach(product, categories)
        return self.get_by_id(product.pk)

    def replace(
        self, product: Product, categories: Sequence[Category]
    ) -> Optional[Product]:
        with transaction.atomic():
            if not self.replace_scalars(product, PRODUCT_SCALAR_FIELDS):
                return None
            ProductCategory.objects.filter(product_id=product.pk).delete()
            self._attach(product, categories)
        return self.get_by_id(product.pk)
