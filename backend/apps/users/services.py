from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from django.db import IntegrityError

from apps.api.exceptions import (
    AssociationNotFound,
    ReferentialConflict,
    ResourceNotFound,
    ValidationFailed,
)
from apps.common import get_logger
from apps.common.pagination import Page, PageSpec
from apps.common.repository import DeleteOutcome
from apps.common.validation import Operation, check_sort_fields, ensure_valid

from .commands import UserWriteCommand
from .dtos import UserDTO
from .mappers import UserMapper
from .models import Role
from .protocols import UserRepositoryProtocol
from .validators import UserValidator

logger = get_logger(__name__).bind(component="users", layer="service")

DUPLICATE_EMAIL_MESSAGE = "Email already in use."


class UserService:
    def __init__(
        self,
        users: UserRepositoryProtocol,
        validator: Optional[UserValidator] = None,
    ):
        self.users = users
        self.validator = validator or UserValidator(users)
        self.logger = logger.bind(service="UserService")

    def find_page(self, page_spec: PageSpec) -> Page[UserDTO]:
        check_sort_fields(page_spec, self.users.sortable_fields)
        self.logger.debug("Listing users", page=page_spec.page, size=page_spec.size)
        return self.users.scan_paged(page_spec).map(UserMapper.to_dto)

    def find_by_id(self, user_id: int) -> UserDTO:
        self.logger.debug("Fetching user", user_id=user_id)
        user = self.users.get_by_id(user_id)
        if user is None:
            self.logger.info("User not found", user_id=user_id)
            raise ResourceNotFound("user", user_id)
        return UserMapper.to_dto(user)

    def insert(self, data: Union[Dict[str, Any], UserWriteCommand]) -> UserDTO:
        cmd = self._command(data)
        self.logger.info("Creating user", email=cmd.email, role_ids=cmd.role_ids)
        self._validate(cmd, Operation.INSERT)
        roles = self._resolve_roles(cmd.role_ids)
        user = UserMapper.to_entity(cmd)
        user.set_password(cmd.password)
        try:
            saved = self.users.insert(user, roles)
        except IntegrityError as exc:
            # A concurrent insert can get past the email lookup.
            self.logger.warning(
                "User creation failed due to integrity error",
                email=cmd.email,
                error=str(exc),
            )
            self._raise_if_email_taken(cmd.email, exclude_id=None, cause=exc)
            raise
        self.logger.info("User created", user_id=saved.pk)
        return UserMapper.to_dto(saved)

    def update(
        self, user_id: int, data: Union[Dict[str, Any], UserWriteCommand]
    ) -> UserDTO:
        cmd = self._command(data)
        self.logger.info("Updating user", user_id=user_id)
        user = self.users.get_by_id(user_id)
        if user is None:
            self.logger.warning("User update failed: not found", user_id=user_id)
            raise ResourceNotFound("user", user_id)
        self._validate(cmd, Operation.UPDATE, user_id=user_id)
        roles = self._resolve_roles(cmd.role_ids)
        UserMapper.copy_to_entity(cmd, user)
        if cmd.has_password:
            user.set_password(cmd.password)
        try:
            saved = self.users.replace(user, roles)
        except IntegrityError as exc:
            self.logger.warning(
                "User update failed due to integrity error",
                user_id=user_id,
                error=str(exc),
            )
            self._raise_if_email_taken(cmd.email, exclude_id=user_id, cause=exc)
            raise
        if saved is None:
            self.logger.warning("User update failed: removed concurrently", user_id=user_id)
            raise ResourceNotFound("user", user_id)
        self.logger.info("User updated", user_id=user_id)
        return UserMapper.to_dto(saved)

    def delete(self, user_id: int) -> None:
        self.logger.info("Deleting user", user_id=user_id)
        outcome = self.users.delete_by_id(user_id)
        if outcome is DeleteOutcome.ABSENT:
            self.logger.warning("User deletion failed: not found", user_id=user_id)
            raise ResourceNotFound("user", user_id)
        if outcome is DeleteOutcome.REFERENCED:
            self.logger.warning("User deletion blocked by dependent records", user_id=user_id)
            raise ReferentialConflict("user", user_id)
        self.logger.info("User deleted", user_id=user_id)

    def _raise_if_email_taken(self, email: str, exclude_id, cause: Exception) -> None:
        # Only a constraint hit on the email is reported as a field error.
        if self.users.email_exists(email, exclude_id=exclude_id):
            raise ValidationFailed({"email": [DUPLICATE_EMAIL_MESSAGE]}) from cause

    @staticmethod
    def _command(data: Union[Dict[str, Any], UserWriteCommand]) -> UserWriteCommand:
        if isinstance(data, UserWriteCommand):
            return data
        return UserWriteCommand.from_raw(data)

    def _validate(self, cmd: UserWriteCommand, operation: Operation, user_id=None) -> None:
        violations = self.validator.validate(cmd, operation, user_id=user_id)
        if violations:
            self.logger.warning(
                "User validation failed",
                operation=operation.value,
                fields=sorted({v.field_name for v in violations}),
                user_id=user_id,
            )
        ensure_valid(violations)

    def _resolve_roles(self, role_ids: List[int]) -> List[Role]:
        resolved: List[Role] = []
        for role_id in role_ids:
            role = self.users.get_role_by_id(role_id)
            if role is None:
                self.logger.warning("Role reference did not resolve", role_id=role_id)
                raise AssociationNotFound("role", role_id)
            resolved.append(role)
        return resolved
