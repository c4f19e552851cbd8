from typing import List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import EmailValidator

from apps.common.validation import (
    FieldViolation,
    Operation,
    is_blank,
    rejected_ids_violations,
)

from .commands import UserWriteCommand
from .protocols import UserRepositoryProtocol

DEFAULT_PASSWORD_MIN_LENGTH = 6


class UserValidator:
    """Checks a user write command for a given operation.

    Structural rules run first. The email uniqueness lookup only happens
    once they all pass, so a malformed request never reaches the store.
    """

    def __init__(
        self, users: UserRepositoryProtocol, password_min_length: Optional[int] = None
    ):
        self.users = users
        if password_min_length is None:
            password_min_length = getattr(
                settings, "USER_PASSWORD_MIN_LENGTH", DEFAULT_PASSWORD_MIN_LENGTH
            )
        self.password_min_length = password_min_length
        self._email_validator = EmailValidator()

    def validate(
        self,
        command: UserWriteCommand,
        operation: Operation,
        user_id: Optional[int] = None,
    ) -> List[FieldViolation]:
        violations = self.structural(command, operation)
        if violations:
            return violations
        return self.semantic(command, operation, user_id)

    def structural(
        self, command: UserWriteCommand, operation: Operation
    ) -> List[FieldViolation]:
        violations: List[FieldViolation] = []
        if is_blank(command.first_name):
            violations.append(FieldViolation("first_name", "First name is required."))
        if is_blank(command.email):
            violations.append(FieldViolation("email", "Email is required."))
        else:
            try:
                self._email_validator(command.email)
            except DjangoValidationError:
                violations.append(FieldViolation("email", "Enter a valid email address."))
        violations.extend(self._password_rule(command, operation))
        violations.extend(rejected_ids_violations("role_ids", command.rejected_role_ids))
        return violations

    def _password_rule(
        self, command: UserWriteCommand, operation: Operation
    ) -> List[FieldViolation]:
        if not command.has_password:
            if operation is Operation.INSERT:
                return [FieldViolation("password", "Password is required.")]
            # UPDATE keeps the stored password
            return []
        if not isinstance(command.password, str):
            return [FieldViolation("password", "Password must be a string.")]
        if len(command.password) < self.password_min_length:
            return [
                FieldViolation(
                    "password",
                    f"Password must have at least {self.password_min_length} characters.",
                )
            ]
        return []

    def semantic(
        self,
        command: UserWriteCommand,
        operation: Operation,
        user_id: Optional[int] = None,
    ) -> List[FieldViolation]:
        exclude_id = user_id if operation is Operation.UPDATE else None
        if self.users.email_exists(command.email, exclude_id=exclude_id):
            return [FieldViolation("email", "Email already in use.")]
        return []
