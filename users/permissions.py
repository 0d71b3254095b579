from rest_framework import permissions


class CanEditCatalog(permissions.BasePermission):
    """Owners and staff may write; everybody signed in may read"""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.can_edit


class CanDeleteRecords(permissions.BasePermission):
    """Only owners can delete"""

    def has_permission(self, request, view):
        if request.method == 'DELETE':
            return bool(request.user and request.user.is_authenticated and request.user.is_owner)
        return True
