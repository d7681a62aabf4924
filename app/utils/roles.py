"""
Role utility functions

Review capability is decided here and nowhere else, so the approval policy
stays auditable in one place.
"""
from app.models.employee import Role

REVIEWER_ROLES = frozenset({
    Role.WEBSITE_ADMIN,
    Role.COMPANY_ADMIN,
    Role.HR,
})


def role_name(role):
    """
    Safely extract role name from either enum or string

    Args:
        role: Either a Role enum instance or a string

    Returns:
        str: The role name as string
    """
    return role.value if hasattr(role, "value") else str(role)


def can_review(role) -> bool:
    """True if the role may approve or reject leave requests."""
    try:
        return Role(role_name(role)) in REVIEWER_ROLES
    except ValueError:
        return False
