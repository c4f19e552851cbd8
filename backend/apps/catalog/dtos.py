from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


@dataclass
class CategoryDTO:
    id: int
    name: str


@dataclass
class ProductDTO:
    id: int
    name: str
    description: str
    price: Decimal
    img_url: str
    date: Optional[datetime]
    categories: List[CategoryDTO]


"""Read shapes only. Write shapes live in commands.py, mapping in mappers.py."""
