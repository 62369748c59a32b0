from rest_framework.permissions import BasePermission


class IsAuthenticatedUser(BasePermission):
    message = "No authorization token provided. Please login."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)


class IsAdmin(BasePermission):
    message = "Admin access required"

    def has_permission(self, request, view):
        return is_admin_request(request)


def is_admin_request(request) -> bool:
    user = getattr(request, "user", None)
    return bool(user and user.is_authenticated and getattr(user, "is_admin", False))
