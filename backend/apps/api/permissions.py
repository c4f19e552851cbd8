from rest_framework.permissions import SAFE_METHODS, BasePermission

ROLE_OPERATOR = "ROLE_OPERATOR"
ROLE_ADMIN = "ROLE_ADMIN"


def user_authorities(user) -> frozenset:
    if not user or not getattr(user, "is_authenticated", False):
        return frozenset()
    return frozenset(getattr(user, "authorities", ()) or ())


class HasAnyRole(BasePermission):
    """Grant access when the authenticated user holds one of ``required_roles``."""

    required_roles: tuple = ()

    def has_permission(self, request, view):
        return bool(user_authorities(request.user) & set(self.required_roles))


class IsOperatorOrReadOnly(HasAnyRole):
    required_roles = (ROLE_OPERATOR, ROLE_ADMIN)

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)


class IsAdmin(HasAnyRole):
    required_roles = (ROLE_ADMIN,)
