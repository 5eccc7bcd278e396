"""Role-based permission table for marketplace actions."""

ADMIN = "ADMIN"
FINDER = "FINDER"
SEEKER = "SEEKER"

# Ownership rules (own job, own application) live in the routers.
PERMISSIONS: dict[str, tuple[str, ...]] = {
    "job:create": (ADMIN, FINDER),
}


def has_permission(role: str | None, permission: str) -> bool:
    if not role:
        return False
    return role.upper() in PERMISSIONS.get(permission, ())
