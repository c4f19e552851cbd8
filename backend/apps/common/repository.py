from enum import Enum
from typing import Dict, Generic, Iterable, Optional, Sequence, Type, TypeVar

from django.core.paginator import EmptyPage, Paginator
from django.db import IntegrityError, models, transaction
from django.db.models import ProtectedError, RestrictedError

from .pagination import Page, PageSpec, SortKey

T = TypeVar("T", bound=models.Model)


class DeleteOutcome(str, Enum):
    REMOVED = "removed"
    ABSENT = "absent"
    REFERENCED = "referenced"


def paginate(queryset, page_spec: PageSpec) -> Page:
    """Slice an ordered queryset into a zero-based page."""
    paginator = Paginator(queryset, page_spec.size)
    try:
        content = list(paginator.page(page_spec.page + 1).object_list)
    except EmptyPage:
        return Page.empty(page_spec, paginator.count)
    return Page(
        content=content,
        number=page_spec.page,
        size=page_spec.size,
        total_elements=paginator.count,
    )


class GenericRepository(Generic[T]):
    # public sort key -> model column
    sortable_fields: Dict[str, str] = {"id": "id"}

    def __init__(self, model: Type[T]):
        self.model = model

    def _base_queryset(self):
        return self.model.objects.all()

    def get(self, **filters) -> Optional[T]:
        return self._base_queryset().filter(**filters).first()

    def get_by_id(self, pk) -> Optional[T]:
        return self.get(pk=pk)

    def list(self, **filters) -> Iterable[T]:
        return self._base_queryset().filter(**filters)

    def count(self) -> int:
        return self.model.objects.count()

    def ordered(self, queryset, sort: Sequence[SortKey]):
        """Apply sort keys left to right, breaking ties by ascending id."""
        columns = [key.order_expression(self.sortable_fields[key.field]) for key in sort]
        if not any(column.lstrip("-") == "id" for column in columns):
            columns.append("id")
        return queryset.order_by(*columns)

    def scan_paged(self, page_spec: PageSpec) -> Page:
        return paginate(self.ordered(self._base_queryset(), page_spec.sort), page_spec)

    def replace_scalars(self, obj: T, field_names: Sequence[str]) -> bool:
        """Write scalar fields of ``obj`` by primary key; False when the row is gone."""
        values = {name: getattr(obj, name) for name in field_names}
        return self.model.objects.filter(pk=obj.pk).update(**values) > 0

    def delete_by_id(self, pk) -> DeleteOutcome:
        try:
            with transaction.atomic():
                deleted, _ = self.model.objects.filter(pk=pk).delete()
        except (ProtectedError, RestrictedError, IntegrityError):
            return DeleteOutcome.REFERENCED
        return DeleteOutcome.REMOVED if deleted else DeleteOutcome.ABSENT
