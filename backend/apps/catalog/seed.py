"""Reference dataset: three categories, 25 products, two roles and two users.

``seed_catalog`` is idempotent; rows are matched on their natural keys
(category name, product name, role authority, user email).
"""
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.db import transaction

from apps.api.permissions import ROLE_ADMIN, ROLE_OPERATOR
from apps.common import get_logger
from apps.users.models import Role, User

from .models import Category, Product, ProductCategory

logger = get_logger(__name__).bind(component="catalog", layer="seed")

SEED_PASSWORD = "123456"

CATEGORIES = ["Books", "Electronics", "Computers"]

_IMG_BASE = "https://raw.githubusercontent.com/devsuperior/dscatalog-resources/master/backend/img"
_LOREM = "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor incididunt ut labore et dolore magna aliqua."

# (name, price, image, categories)
PRODUCTS = [
    ("The Lord of the Rings", "90.50", "1-big.jpg", ["Books"]),
    ("Smart TV", "2190.00", "2-big.jpg", ["Electronics", "Computers"]),
    ("Macbook Pro", "1250.00", "3-big.jpg", ["Computers"]),
    ("PC Gamer", "1200.00", "4-big.jpg", ["Computers"]),
    ("PC Gamer X", "1350.00", "5-big.jpg", ["Computers"]),
    ("PC Gamer Alfa", "1850.00", "6-big.jpg", ["Computers"]),
    ("PC Gamer Tera", "1950.00", "7-big.jpg", ["Computers"]),
    ("PC Gamer Y", "1700.00", "8-big.jpg", ["Computers"]),
    ("PC Gamer Nitro", "1450.00", "9-big.jpg", ["Computers"]),
    ("PC Gamer Card", "1850.00", "10-big.jpg", ["Computers"]),
    ("PC Gamer Plus", "1350.00", "11-big.jpg", ["Computers"]),
    ("PC Gamer Hex", "1600.00", "12-big.jpg", ["Computers"]),
    ("PC Gamer Turbo", "1900.00", "13-big.jpg", ["Computers"]),
    ("PC Gamer Max", "1850.00", "14-big.jpg", ["Computers"]),
    ("PC Gamer Boo", "1350.00", "15-big.jpg", ["Computers"]),
    ("PC Gamer Foo", "4450.00", "16-big.jpg", ["Computers"]),
    ("PC Gamer Bar", "1250.00", "17-big.jpg", ["Computers"]),
    ("PC Gamer Baz", "1350.00", "18-big.jpg", ["Computers"]),
    ("PC Gamer Hot", "1450.00", "19-big.jpg", ["Computers"]),
    ("PC Gamer Ultra", "2250.00", "20-big.jpg", ["Computers"]),
    ("PC Gamer Asu", "2250.00", "21-big.jpg", ["Computers"]),
    ("PC Gamer Nix", "1350.00", "22-big.jpg", ["Computers"]),
    ("PC Gamer Weed", "1050.00", "23-big.jpg", ["Computers"]),
    ("PC Gamer Tx", "1550.00", "24-big.jpg", ["Computers"]),
    ("PC Gamer Tr", "1650.00", "25-big.jpg", ["Computers"]),
]

ROLES = [ROLE_OPERATOR, ROLE_ADMIN]

# (first_name, last_name, email, roles)
USERS = [
    ("Alex", "Brown", "alex@gmail.com", [ROLE_OPERATOR]),
    ("Maria", "Green", "maria@gmail.com", [ROLE_OPERATOR, ROLE_ADMIN]),
]

SEED_DATE = datetime(2020, 7, 13, 20, 50, 7, tzinfo=dt_timezone.utc)


@dataclass
class SeedSummary:
    categories: int = 0
    products: int = 0
    roles: int = 0
    users: int = 0


def flush_catalog() -> None:
    ProductCategory.objects.all().delete()
    Product.objects.all().delete()
    Category.objects.all().delete()
    User.objects.filter(email__in=[u[2] for u in USERS]).delete()
    Role.objects.all().delete()


@transaction.atomic
def seed_catalog(flush: bool = False) -> SeedSummary:
    summary = SeedSummary()
    if flush:
        logger.info("Flushing catalog data before seeding")
        flush_catalog()

    by_name = {}
    for name in CATEGORIES:
        category, created = Category.objects.get_or_create(name=name)
        by_name[name] = category
        summary.categories += int(created)

    for name, price, image, category_names in PRODUCTS:
        product, created = Product.objects.get_or_create(
            name=name,
            defaults=dict(
                description=_LOREM,
                price=Decimal(price),
                img_url=f"{_IMG_BASE}/{image}",
                date=SEED_DATE,
            ),
        )
        summary.products += int(created)
        if created:
            ProductCategory.objects.bulk_create(
                [ProductCategory(product=product, category=by_name[c]) for c in category_names]
            )

    roles = {}
    for authority in ROLES:
        role, created = Role.objects.get_or_create(authority=authority)
        roles[authority] = role
        summary.roles += int(created)

    for first_name, last_name, email, authorities in USERS:
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            user = User.objects.create_user(
                email, SEED_PASSWORD, first_name=first_name, last_name=last_name
            )
            summary.users += 1
        user.roles.set([roles[a] for a in authorities])

    logger.info(
        "Catalog seed completed",
        categories=summary.categories,
        products=summary.products,
        roles=summary.roles,
        users=summary.users,
    )
    return summary
