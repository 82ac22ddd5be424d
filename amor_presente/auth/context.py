"""
Authentication context shared by every route.

One AuthContext is built per request by `auth.middleware.get_auth_context`,
whatever the principal type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from fastapi import HTTPException

from amor_presente.auth.scopes import Scope, has_scope


class PrincipalType(str, Enum):
    CREATOR = "creator"
    ADMIN = "admin"
    SITE_USER = "site_user"
    GUEST = "guest"


@dataclass(frozen=True)
class AuthContext:
    """
    Usage:
        @router.get("/sites")
        async def list_sites(ctx: AuthContext = Depends(get_auth_context)):
            if ctx.has_scope(Scope.WRITE):
                ...
    """

    principal_type: PrincipalType
    subject_id: str
    email: str | None = None
    name: str | None = None
    scopes: list[str] = field(default_factory=list)
    site_id: str | None = None  # site users only
    approval_status: str | None = None  # creators only
    is_internal: bool = False

    @property
    def is_admin(self) -> bool:
        # Creators listed in `admins` carry the admin scope too.
        return self.has_scope(Scope.ADMIN)

    @property
    def is_creator(self) -> bool:
        return self.principal_type == PrincipalType.CREATOR

    @property
    def is_guest(self) -> bool:
        return self.principal_type in (PrincipalType.SITE_USER, PrincipalType.GUEST)

    def has_scope(self, scope: str | Scope) -> bool:
        scope_str = scope.value if isinstance(scope, Scope) else scope
        return has_scope(self.scopes, scope_str)

    def require_scope(self, scope: str | Scope) -> None:
        if not self.has_scope(scope):
            scope_str = scope.value if isinstance(scope, Scope) else scope
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions. Required scope: {scope_str}",
            )

    def to_log_context(self) -> dict:
        return {
            "principal_type": self.principal_type.value,
            "subject_id": self.subject_id,
            "scopes": self.scopes,
            "site_id": self.site_id,
            "is_internal": self.is_internal,
        }
