from __future__ import annotations

from django.conf import settings

from apps.common.pagination import sort_keys_from

from .repositories import CategoryRepository, ProductRepository
from .services import CategoryService, ProductService
from .validators import validate_product_write


def build_product_service() -> ProductService:
    return ProductService(
        products=ProductRepository(),
        validator=validate_product_write,
        default_sort=sort_keys_from(getattr(settings, "CATALOG_DEFAULT_SORT", [])),
    )


def build_category_service() -> CategoryService:
    return CategoryService(categories=CategoryRepository())
