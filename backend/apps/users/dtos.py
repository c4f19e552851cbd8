from dataclasses import dataclass
from typing import List


@dataclass
class RoleDTO:
    id: int
    authority: str


@dataclass
class UserDTO:
    id: int
    first_name: str
    last_name: str
    email: str
    roles: List[RoleDTO]
