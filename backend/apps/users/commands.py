from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apps.common.validation import parse_id_list


@dataclass
class UserWriteCommand:
    """Write shape for user insert and full-replace update.

    ``password`` is optional here; whether it must be present depends on
    the operation and is decided by the validator. It is kept as sent,
    so a non-string value reaches the validator and is reported there.
    """

    first_name: str
    last_name: str
    email: str
    password: Any = None
    role_ids: List[int] = field(default_factory=list)
    rejected_role_ids: List[Any] = field(default_factory=list)

    @property
    def has_password(self) -> bool:
        return self.password is not None and self.password != ""

    @staticmethod
    def from_raw(payload: Dict[str, Any]) -> "UserWriteCommand":
        data = dict(payload or {})
        data.pop("id", None)
        roles = data.get("role_ids")
        if roles is None:
            roles = data.get("roles")
        password = data.get("password")
        role_ids, rejected = parse_id_list(roles)
        return UserWriteCommand(
            first_name=str(data.get("first_name") or "").strip(),
            last_name=str(data.get("last_name") or "").strip(),
            email=str(data.get("email") or "").strip(),
            password=None if password is None or password == "" else password,
            role_ids=role_ids,
            rejected_role_ids=rejected,
        )
