import types
import unittest
from decimal import Decimal

from apps.api.exceptions import (
    AssociationNotFound,
    ReferentialConflict,
    ResourceNotFound,
    ValidationFailed,
)
from apps.catalog.commands import ProductWriteCommand
from apps.catalog.services import CategoryService, ProductService
from apps.common.pagination import Page, PageSpec, SortKey
from apps.common.repository import DeleteOutcome


class StubLinks:
    def __init__(self, categories):
        self._links = [
            types.SimpleNamespace(id=i, category=c) for i, c in enumerate(categories, 1)
        ]

    def all(self):
        return list(self._links)


def make_category(category_id, name):
    return types.SimpleNamespace(id=category_id, name=name)


def make_product(product_id, name, price, categories):
    return types.SimpleNamespace(
        id=product_id,
        pk=product_id,
        name=name,
        description="",
        price=Decimal(price),
        img_url="",
        date=None,
        category_links=StubLinks(categories),
    )


def _page(items, page_spec):
    start = page_spec.page * page_spec.size
    return Page(
        content=items[start:start + page_spec.size],
        number=page_spec.page,
        size=page_spec.size,
        total_elements=len(items),
    )


class FakeProductRepository:
    sortable_fields = {"id": "id", "name": "name", "price": "price", "date": "date"}

    def __init__(self, categories, products=()):
        self.categories = {c.id: c for c in categories}
        self.rows = {p.id: p for p in products}
        self.referenced = set()
        self.last_page_spec = None
        self.filtered_calls = []

    def _sorted(self, items, page_spec):
        self.last_page_spec = page_spec
        items = sorted(items, key=lambda p: p.id)
        for key in reversed(page_spec.sort):
            items = sorted(items, key=lambda p: getattr(p, key.field), reverse=key.descending)
        return items

    def scan_paged(self, page_spec):
        return _page(self._sorted(self.rows.values(), page_spec), page_spec)

    def scan_filtered(self, page_spec, category_id, name):
        self.filtered_calls.append((category_id, name))
        items = [
            p
            for p in self.rows.values()
            if (not category_id or any(l.category.id == category_id for l in p.category_links.all()))
            and (not name or name.lower() in p.name.lower())
        ]
        return _page(self._sorted(items, page_spec), page_spec)

    def get_by_id(self, pk):
        return self.rows.get(pk)

    def get_category_by_id(self, pk):
        return self.categories.get(pk)

    def insert(self, product, categories):
        new_id = max(self.rows, default=0) + 1
        row = make_product(new_id, product.name, product.price, categories)
        row.description = product.description
        row.img_url = product.img_url
        row.date = product.date
        self.rows[new_id] = row
        return row

    def replace(self, product, categories):
        if product.id not in self.rows:
            return None
        product.category_links = StubLinks(categories)
        self.rows[product.id] = product
        return product

    def delete_by_id(self, pk):
        if pk not in self.rows:
            return DeleteOutcome.ABSENT
        if pk in self.referenced:
            return DeleteOutcome.REFERENCED
        del self.rows[pk]
        return DeleteOutcome.REMOVED

    def count(self):
        return len(self.rows)


class FakeCategoryRepository:
    sortable_fields = {"id": "id", "name": "name"}

    def __init__(self, categories):
        self.rows = {c.id: c for c in categories}

    def list(self, **filters):
        return sorted(self.rows.values(), key=lambda c: (c.name, c.id))

    def get_by_id(self, pk):
        return self.rows.get(pk)

    def scan_paged(self, page_spec):
        return _page(sorted(self.rows.values(), key=lambda c: c.id), page_spec)


BOOKS = make_category(1, "Books")
ELECTRONICS = make_category(2, "Electronics")
COMPUTERS = make_category(3, "Computers")


def seeded_repository():
    return FakeProductRepository(
        [BOOKS, ELECTRONICS, COMPUTERS],
        [
            make_product(1, "The Lord of the Rings", "90.50", [BOOKS]),
            make_product(2, "Smart TV", "2190.00", [ELECTRONICS, COMPUTERS]),
            make_product(3, "Macbook Pro", "1250.00", [COMPUTERS]),
            make_product(4, "PC Gamer", "1200.00", [COMPUTERS]),
        ],
    )


def write_command(**overrides):
    values = dict(
        name="Phone",
        description="Good phone",
        price=Decimal("800.00"),
        img_url="img",
        category_ids=[2],
    )
    values.update(overrides)
    return ProductWriteCommand(**values)


class ProductServiceQueryTests(unittest.TestCase):
    def setUp(self):
        self.repo = seeded_repository()
        self.service = ProductService(self.repo)

    def test_find_page_without_filters_uses_paged_scan(self):
        page = self.service.find_page(PageSpec(page=0, size=3))
        self.assertEqual([p.id for p in page.content], [1, 2, 3])
        self.assertEqual(page.total_elements, 4)
        self.assertEqual(page.total_pages, 2)
        self.assertEqual(self.repo.filtered_calls, [])

    def test_find_page_filters_by_category(self):
        page = self.service.find_page(PageSpec(size=10), category_id=3)
        self.assertEqual([p.id for p in page.content], [2, 3, 4])
        for dto in page.content:
            self.assertIn(3, [c.id for c in dto.categories])
        self.assertEqual(self.repo.filtered_calls, [(3, "")])

    def test_find_page_combines_category_and_name(self):
        page = self.service.find_page(PageSpec(size=10), category_id=3, name="  pc  ")
        self.assertEqual([p.name for p in page.content], ["PC Gamer"])
        self.assertEqual(self.repo.filtered_calls, [(3, "pc")])

    def test_zero_category_means_no_filter(self):
        page = self.service.find_page(PageSpec(size=10), category_id=0, name="")
        self.assertEqual(page.total_elements, 4)

    def test_find_page_beyond_last_page_is_empty(self):
        page = self.service.find_page(PageSpec(page=5, size=3))
        self.assertEqual(page.content, [])
        self.assertEqual(page.total_elements, 4)
        self.assertTrue(page.is_empty)

    def test_find_page_applies_sort(self):
        page = self.service.find_page(
            PageSpec(size=10, sort=(SortKey.parse("name,asc"),))
        )
        self.assertEqual(
            [p.name for p in page.content][:3], ["Macbook Pro", "PC Gamer", "Smart TV"]
        )

    def test_default_sort_applies_only_when_request_has_none(self):
        service = ProductService(self.repo, default_sort=[SortKey.parse("price,desc")])
        page = service.find_page(PageSpec(size=10))
        self.assertEqual(page.content[0].name, "Smart TV")
        explicit = service.find_page(PageSpec(size=10, sort=(SortKey.parse("id"),)))
        self.assertEqual(explicit.content[0].id, 1)

    def test_unknown_sort_field_is_a_validation_error(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.find_page(PageSpec(sort=(SortKey.parse("weight"),)))
        self.assertIn("sort", ctx.exception.errors)

    def test_find_by_id(self):
        dto = self.service.find_by_id(2)
        self.assertEqual(dto.name, "Smart TV")
        self.assertEqual(dto.price, Decimal("2190.00"))
        self.assertEqual([c.name for c in dto.categories], ["Electronics", "Computers"])

    def test_find_by_id_missing_raises_not_found(self):
        with self.assertRaises(ResourceNotFound) as ctx:
            self.service.find_by_id(1000)
        self.assertEqual(ctx.exception.details, {"resource": "product", "id": "1000"})


class ProductServiceWriteTests(unittest.TestCase):
    def setUp(self):
        self.repo = seeded_repository()
        self.service = ProductService(self.repo)

    def test_insert_returns_written_values(self):
        dto = self.service.insert(write_command(category_ids=[2, 3]))
        self.assertEqual(dto.id, 5)
        self.assertEqual(dto.name, "Phone")
        self.assertEqual(dto.price, Decimal("800.00"))
        self.assertEqual([c.id for c in dto.categories], [2, 3])
        self.assertEqual(self.service.find_by_id(dto.id).name, "Phone")

    def test_insert_accepts_raw_payload(self):
        dto = self.service.insert(
            {"name": "Raw", "price": "5.00", "categories": [{"id": 1}]}
        )
        self.assertEqual(dto.name, "Raw")
        self.assertEqual([c.id for c in dto.categories], [1])

    def test_insert_with_unknown_category_raises_and_keeps_count(self):
        before = self.repo.count()
        with self.assertRaises(AssociationNotFound) as ctx:
            self.service.insert(write_command(category_ids=[2, 99]))
        self.assertEqual(ctx.exception.details["id"], "99")
        self.assertEqual(self.repo.count(), before)

    def test_insert_collects_all_violations(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(write_command(name="", price=None, category_ids=[]))
        self.assertEqual(set(ctx.exception.errors), {"name", "price", "category_ids"})
        self.assertEqual(self.repo.count(), 4)

    def test_insert_rejects_non_finite_and_oversized_prices(self):
        for price in ("NaN", "Infinity", "12345678901234", "1.239", "abc"):
            with self.subTest(price=price):
                with self.assertRaises(ValidationFailed) as ctx:
                    self.service.insert({"name": "Raw", "price": price, "categories": [1]})
                self.assertEqual(list(ctx.exception.errors), ["price"])
        self.assertEqual(self.repo.count(), 4)

    def test_insert_reports_non_integer_category_ids(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.service.insert(
                {"name": "Raw", "price": "5.00", "categories": [1, "abc", None]}
            )
        self.assertEqual(list(ctx.exception.errors), ["category_ids"])
        self.assertEqual(self.repo.count(), 4)

    def test_update_replaces_scalars_and_categories(self):
        dto = self.service.update(3, write_command(name="Macbook Air", category_ids=[1]))
        self.assertEqual(dto.id, 3)
        self.assertEqual(dto.name, "Macbook Air")
        self.assertEqual([c.id for c in dto.categories], [1])

    def test_update_missing_raises_not_found_without_mutation(self):
        with self.assertRaises(ResourceNotFound):
            self.service.update(1000, write_command())
        self.assertEqual(self.repo.count(), 4)
        self.assertNotIn(1000, self.repo.rows)

    def test_update_missing_is_reported_before_validation(self):
        with self.assertRaises(ResourceNotFound):
            self.service.update(1000, write_command(name=""))

    def test_update_racing_with_delete_raises_not_found(self):
        self.repo.replace = lambda product, categories: None
        with self.assertRaises(ResourceNotFound):
            self.service.update(3, write_command())

    def test_delete_existing(self):
        self.service.delete(4)
        with self.assertRaises(ResourceNotFound):
            self.service.find_by_id(4)

    def test_delete_missing_raises_not_found(self):
        with self.assertRaises(ResourceNotFound):
            self.service.delete(1000)
        self.assertEqual(self.repo.count(), 4)

    def test_delete_referenced_raises_conflict(self):
        self.repo.referenced.add(1)
        with self.assertRaises(ReferentialConflict) as ctx:
            self.service.delete(1)
        self.assertEqual(ctx.exception.code, "INTEGRITY_VIOLATION")
        self.assertEqual(self.repo.count(), 4)

    def test_custom_validator_receives_operation(self):
        seen = []

        def validator(command, operation):
            seen.append(operation.value)
            return []

        service = ProductService(self.repo, validator=validator)
        service.insert(write_command())
        service.update(1, write_command())
        self.assertEqual(seen, ["insert", "update"])


class CategoryServiceTests(unittest.TestCase):
    def setUp(self):
        self.service = CategoryService(
            FakeCategoryRepository([BOOKS, ELECTRONICS, COMPUTERS])
        )

    def test_list_categories_sorted_by_name(self):
        names = [c.name for c in self.service.list_categories()]
        self.assertEqual(names, ["Books", "Computers", "Electronics"])

    def test_find_page(self):
        page = self.service.find_page(PageSpec(page=0, size=2))
        self.assertEqual([c.id for c in page.content], [1, 2])
        self.assertEqual(page.total_pages, 2)

    def test_find_by_id_missing(self):
        with self.assertRaises(ResourceNotFound):
            self.service.find_by_id(42)
        self.assertEqual(self.service.find_by_id(3).name, "Computers")
