"""Paging primitives shared by repositories, services and views.

Page numbers are zero-based. A request beyond the last page is not an error:
it produces an empty page that still reports the full totals.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from math import ceil
from typing import Callable, Generic, Iterable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortKey:
    field: str
    direction: Direction = Direction.ASC

    @property
    def descending(self) -> bool:
        return self.direction is Direction.DESC

    def order_expression(self, column: str) -> str:
        return f"-{column}" if self.descending else column

    @classmethod
    def parse(cls, raw: str) -> "SortKey":
        """Parse ``field`` or ``field,asc|desc``."""
        parts = [part.strip() for part in str(raw or "").split(",")]
        if not parts[0] or len(parts) > 2:
            raise ValueError(f"Invalid sort expression '{raw}'")
        direction = Direction.ASC
        if len(parts) == 2 and parts[1]:
            try:
                direction = Direction(parts[1].lower())
            except ValueError:
                raise ValueError(
                    f"Invalid sort direction '{parts[1]}', expected asc or desc"
                ) from None
        return cls(field=parts[0], direction=direction)


@dataclass(frozen=True)
class PageSpec:
    page: int = 0
    size: int = 12
    sort: Tuple[SortKey, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.page < 0:
            raise ValueError("page must be zero or positive")
        if self.size < 1:
            raise ValueError("size must be positive")
        object.__setattr__(self, "sort", tuple(self.sort))

    def with_sort(self, sort: Iterable[SortKey]) -> "PageSpec":
        return replace(self, sort=tuple(sort))


@dataclass(frozen=True)
class Page(Generic[T]):
    content: List[T]
    number: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total_elements / self.size) if self.size else 0

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def is_first(self) -> bool:
        return self.number == 0

    @property
    def is_last(self) -> bool:
        return self.number + 1 >= self.total_pages

    @property
    def is_empty(self) -> bool:
        return not self.content

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        return Page(
            content=[fn(item) for item in self.content],
            number=self.number,
            size=self.size,
            total_elements=self.total_elements,
        )

    @classmethod
    def empty(cls, page_spec: PageSpec, total_elements: int = 0) -> "Page[T]":
        return cls(
            content=[],
            number=page_spec.page,
            size=page_spec.size,
            total_elements=total_elements,
        )


def sort_keys_from(raw_values: Sequence[str]) -> List[SortKey]:
    return [SortKey.parse(value) for value in raw_values if str(value or "").strip()]
