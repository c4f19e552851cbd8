from __future__ import annotations

from django.conf import settings

from .repositories import UserRepository
from .services import UserService
from .validators import DEFAULT_PASSWORD_MIN_LENGTH, UserValidator


def build_user_service() -> UserService:
    users = UserRepository()
    validator = UserValidator(
        users,
        password_min_length=getattr(
            settings, "USER_PASSWORD_MIN_LENGTH", DEFAULT_PASSWORD_MIN_LENGTH
        ),
    )
    return UserService(users=users, validator=validator)
