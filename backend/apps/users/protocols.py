from __future__ import annotations

from typing import Dict, Optional, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from apps.common.pagination import Page, PageSpec
    from apps.common.repository import DeleteOutcome
    from apps.users.models import Role, User


class UserRepositoryProtocol(Protocol):
    sortable_fields: Dict[str, str]

    def scan_paged(self, page_spec: "PageSpec") -> "Page": ...

    def get_by_id(self, pk) -> Optional["User"]: ...

    def get_role_by_id(self, pk) -> Optional["Role"]: ...

    def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool: ...

    def insert(self, user: "User", roles: Sequence["Role"]) -> "User": ...

    def replace(self, user: "User", roles: Sequence["Role"]) -> Optional["User"]: ...

    def delete_by_id(self, pk) -> "DeleteOutcome": ...
