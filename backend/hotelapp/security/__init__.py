# Security module
from hotelapp.security.auth import (
    CurrentUser, get_current_user, require_roles,
    require_admin, require_staff, require_any_role
)

__all__ = [
    'CurrentUser', 'get_current_user', 'require_roles',
    'require_admin', 'require_staff', 'require_any_role'
]
