"""
Permission scopes.

Scopes control what a principal may do. Pending or rejected creators only
hold READ until an admin approves them.
"""

from enum import Enum


class Scope(str, Enum):
    READ = "read"  # Browse own sites, catalog, orders
    WRITE = "write"  # Create/update sites and site products
    RSVP = "rsvp"  # Submit RSVPs as a signed-in guest
    ADMIN = "admin"  # Platform administration
    INTERNAL = "internal"  # Service-level access (bypasses owner RLS)


# Scope hierarchies - higher scopes include lower ones
SCOPE_HIERARCHY = {
    Scope.ADMIN: [Scope.READ, Scope.WRITE],
    Scope.INTERNAL: [Scope.READ, Scope.WRITE, Scope.RSVP, Scope.ADMIN],
    Scope.WRITE: [Scope.READ],
}


def has_scope(granted_scopes: list[str], required_scope: str) -> bool:
    """
    Check if granted scopes include the required scope.

    Handles scope hierarchy - e.g., INTERNAL includes all scopes.
    """
    if required_scope in granted_scopes:
        return True

    for granted in granted_scopes:
        try:
            granted_enum = Scope(granted)
        except ValueError:
            continue
        implied = SCOPE_HIERARCHY.get(granted_enum, [])
        if required_scope in [s.value for s in implied]:
            return True

    return False


def scopes_for_creator(approval_status: str | None) -> list[str]:
    if approval_status == "approved":
        return [Scope.READ.value, Scope.WRITE.value]
    return [Scope.READ.value]
