from typing import Iterable, List

from .commands import UserWriteCommand
from .dtos import RoleDTO, UserDTO
from .models import Role, User

USER_SCALAR_FIELDS = ("first_name", "last_name", "email", "password")


class RoleMapper:
    @staticmethod
    def to_dto(role: Role) -> RoleDTO:
        return RoleDTO(id=role.id, authority=role.authority)


class UserMapper:
    # The password is never copied here; UserService hashes it via set_password.

    @staticmethod
    def to_dto(user: User) -> UserDTO:
        roles = sorted(user.roles.all(), key=lambda role: role.id)
        return UserDTO(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            roles=[RoleMapper.to_dto(r) for r in roles],
        )

    @staticmethod
    def many_to_dto(users: Iterable[User]) -> List[UserDTO]:
        return [UserMapper.to_dto(u) for u in users]

    @staticmethod
    def to_entity(command: UserWriteCommand) -> User:
        return UserMapper.copy_to_entity(command, User())

    @staticmethod
    def copy_to_entity(command: UserWriteCommand, user: User) -> User:
        user.first_name = command.first_name
        user.last_name = command.last_name
        user.email = command.email
        return user
