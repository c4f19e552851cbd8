from typing import Optional, Sequence

from django.db import transaction
from django.db.models import Prefetch

from apps.common.repository import GenericRepository

from .mappers import USER_SCALAR_FIELDS
from .models import Role, User


class RoleRepository(GenericRepository[Role]):
    sortable_fields = {"id": "id", "authority": "authority"}

    def __init__(self):
        super().__init__(Role)


class UserRepository(GenericRepository[User]):
    sortable_fields = {
        "id": "id",
        "first_name": "first_name",
        "last_name": "last_name",
        "email": "email",
    }

    def __init__(self):
        super().__init__(User)
        self.roles = RoleRepository()

    def _base_queryset(self):
        return self.model.objects.prefetch_related(
            Prefetch("roles", queryset=Role.objects.order_by("id"))
        )

    def get_role_by_id(self, pk) -> Optional[Role]:
        return self.roles.get_by_id(pk)

    def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        queryset = self.model.objects.filter(email__iexact=email)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def insert(self, user: User, roles: Sequence[Role]) -> User:
        with transaction.atomic():
            user.save(force_insert=True)
            user.roles.set(roles)
        return self.get_by_id(user.pk)

    def replace(self, user: User, roles: Sequence[Role]) -> Optional[User]:
        with transaction.atomic():
            if not self.replace_scalars(user, USER_SCALAR_FIELDS):
                return None
            user.roles.set(roles)
        return self.get_by_id(user.pk)
