from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from apps.api.exceptions import (
    AssociationNotFound,
    ReferentialConflict,
    ResourceNotFound,
)
from apps.common import get_logger
from apps.common.pagination import Page, PageSpec, SortKey
from apps.common.repository import DeleteOutcome
from apps.common.validation import (
    FieldViolation,
    Operation,
    check_sort_fields,
    ensure_valid,
)

from .commands import ProductWriteCommand
from .dtos import CategoryDTO, ProductDTO
from .mappers import CategoryMapper, ProductMapper
from .models import Category
from .protocols import CategoryRepositoryProtocol, ProductRepositoryProtocol
from .validators import validate_product_write

logger = get_logger(__name__).bind(component="catalog", layer="service")

ProductValidator = Callable[[ProductWriteCommand, Operation], List[FieldViolation]]


class ProductService:
    def __init__(
        self,
        products: ProductRepositoryProtocol,
        validator: ProductValidator = validate_product_write,
        default_sort: Sequence[SortKey] = (),
    ):
        self.products = products
        self.validator = validator
        self.default_sort = tuple(default_sort)
        self.logger = logger.bind(service="ProductService")

    def find_page(
        self,
        page_spec: PageSpec,
        category_id: Optional[int] = 0,
        name: Optional[str] = "",
    ) -> Page[ProductDTO]:
        if not page_spec.sort and self.default_sort:
            page_spec = page_spec.with_sort(self.default_sort)
        check_sort_fields(page_spec, self.products.sortable_fields)
        name = (name or "").strip()
        self.logger.debug(
            "Listing products",
            page=page_spec.page,
            size=page_spec.size,
            sort=[f"{k.field},{k.direction.value}" for k in page_spec.sort],
            category_id=category_id or None,
            name=name or None,
        )
        if category_id or name:
            page = self.products.scan_filtered(page_spec, category_id or None, name)
        else:
            page = self.products.scan_paged(page_spec)
        return page.map(ProductMapper.to_dto)

    def find_by_id(self, product_id: int) -> ProductDTO:
        self.logger.debug("Fetching product", product_id=product_id)
        product = self.products.get_by_id(product_id)
        if product is None:
            self.logger.info("Product not found", product_id=product_id)
            raise ResourceNotFound("product", product_id)
        return ProductMapper.to_dto(product)

    def insert(self, data: Union[Dict[str, Any], ProductWriteCommand]) -> ProductDTO:
        cmd = self._command(data)
        self.logger.info("Creating product", name=cmd.name, category_ids=cmd.category_ids)
        self._validate(cmd, Operation.INSERT)
        product = ProductMapper.to_entity(cmd)
        categories = self._resolve_categories(cmd.category_ids)
        saved = self.products.insert(product, categories)
        self.logger.info("Product created", product_id=saved.pk)
        return ProductMapper.to_dto(saved)

    def update(
        self, product_id: int, data: Union[Dict[str, Any], ProductWriteCommand]
    ) -> ProductDTO:
        cmd = self._command(data)
        self.logger.info("Updating product", product_id=product_id)
        product = self.products.get_by_id(product_id)
        if product is None:
            self.logger.warning("Product update failed: not found", product_id=product_id)
            raise ResourceNotFound("product", product_id)
        self._validate(cmd, Operation.UPDATE, product_id=product_id)
        categories = self._resolve_categories(cmd.category_ids)
        ProductMapper.copy_to_entity(cmd, product)
        saved = self.products.replace(product, categories)
        if saved is None:
            self.logger.warning(
                "Product update failed: removed concurrently", product_id=product_id
            )
            raise ResourceNotFound("product", product_id)
        self.logger.info("Product updated", product_id=product_id)
        return ProductMapper.to_dto(saved)

    def delete(self, product_id: int) -> None:
        self.logger.info("Deleting product", product_id=product_id)
        outcome = self.products.delete_by_id(product_id)
        if outcome is DeleteOutcome.ABSENT:
            self.logger.warning("Product deletion failed: not found", product_id=product_id)
            raise ResourceNotFound("product", product_id)
        if outcome is DeleteOutcome.REFERENCED:
            self.logger.warning(
                "Product deletion blocked by dependent records", product_id=product_id
            )
            raise ReferentialConflict("product", product_id)
        self.logger.info("Product deleted", product_id=product_id)

    @staticmethod
    def _command(data: Union[Dict[str, Any], ProductWriteCommand]) -> ProductWriteCommand:
        if isinstance(data, ProductWriteCommand):
            return data
        return ProductWriteCommand.from_raw(data)

    def _validate(self, cmd: ProductWriteCommand, operation: Operation, **context) -> None:
        violations = self.validator(cmd, operation)
        if violations:
            self.logger.warning(
                "Product validation failed",
                operation=operation.value,
                fields=sorted({v.field_name for v in violations}),
                **context,
            )
        ensure_valid(violations)

    def _resolve_categories(self, category_ids: Sequence[int]) -> List[Category]:
        resolved: List[Category] = []
        for category_id in category_ids:
            category = self.products.get_category_by_id(category_id)
            if category is None:
                self.logger.warning(
                    "Category reference did not resolve", category_id=category_id
                )
                raise AssociationNotFound("category", category_id)
            resolved.append(category)
        return resolved


class CategoryService:
    def __init__(self, categories: CategoryRepositoryProtocol):
        self.categories = categories
        self.logger = logger.bind(service="CategoryService")

    def list_categories(self) -> List[CategoryDTO]:
        self.logger.debug("Listing categories")
        return CategoryMapper.many_to_dto(self.categories.list())

    def find_page(self, page_spec: PageSpec) -> Page[CategoryDTO]:
        check_sort_fields(page_spec, self.categories.sortable_fields)
        self.logger.debug("Listing category page", page=page_spec.page, size=page_spec.size)
        return self.categories.scan_paged(page_spec).map(CategoryMapper.to_dto)

    def find_by_id(self, category_id: int) -> CategoryDTO:
        self.logger.debug("Fetching category", category_id=category_id)
        category = self.categories.get_by_id(category_id)
        if category is None:
            self.logger.info("Category not found", category_id=category_id)
            raise ResourceNotFound("category", category_id)
        return CategoryMapper.to_dto(category)
