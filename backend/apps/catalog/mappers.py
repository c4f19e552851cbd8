from typing import Iterable, List

from .commands import ProductWriteCommand
from .dtos import CategoryDTO, ProductDTO
from .models import Category, Product

PRODUCT_SCALAR_FIELDS = ("name", "description", "price", "img_url", "date")


def _linked_categories(product: Product) -> List[Category]:
    links = getattr(product, "category_links", None)
    if links is None:
        return []
    ordered = sorted(links.all(), key=lambda link: link.id)
    return [link.category for link in ordered]


class CategoryMapper:
    @staticmethod
    def to_dto(cat: Category) -> CategoryDTO:
        return CategoryDTO(id=cat.id, name=cat.name)

    @staticmethod
    def many_to_dto(categories: Iterable[Category]) -> List[CategoryDTO]:
        return [CategoryMapper.to_dto(c) for c in categories]


class ProductMapper:
    """Pure conversions between Product rows and transfer shapes.

    Category ids in a write command are left untouched here; turning them
    into Category rows needs the store and is done by the service.
    """

    @staticmethod
    def to_dto(product: Product) -> ProductDTO:
        return ProductDTO(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            img_url=product.img_url,
            date=product.date,
            categories=CategoryMapper.many_to_dto(_linked_categories(product)),
        )

    @staticmethod
    def many_to_dto(products: Iterable[Product]) -> List[ProductDTO]:
        return [ProductMapper.to_dto(p) for p in products]

    @staticmethod
    def to_entity(command: ProductWriteCommand) -> Product:
        product = Product()
        return ProductMapper.copy_to_entity(command, product)

    @staticmethod
    def copy_to_entity(command: ProductWriteCommand, product: Product) -> Product:
        product.name = command.name
        product.description = command.description
        product.price = command.price
        product.img_url = command.img_url
        if command.date is not None:
            product.date = command.date
        return product
