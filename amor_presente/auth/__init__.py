"""
Authentication and authorization.

Three principal families reach the API:
- Creators: Supabase Auth users, verified from their access token
- Admins: local accounts in `admins`, tokens signed with ADMIN_JWT_SECRET
- Guests: site users and platform guests, tokens signed with GUEST_JWT_SECRET
"""

from amor_presente.auth.context import AuthContext, PrincipalType
from amor_presente.auth.scopes import Scope, has_scope

__all__ = ["AuthContext", "PrincipalType", "Scope", "has_scope"]
