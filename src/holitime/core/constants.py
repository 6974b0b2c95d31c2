"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import UserRole

DEFAULT_SESSION_DAYS = 7
DEFAULT_LIST_LIMIT = 200
MAX_LIST_LIMIT = 500

MAX_TIME_ENTRIES = 3
MIN_WORK_PERIOD_SECONDS = 60
ROUNDING_MINUTES = 15
DROP_UNASSIGN_WINDOW_HOURS = 24

MIN_PASSWORD_LENGTH = 8
ADMIN_OVERRIDE_SIGNATURE = "Admin Override"

ROLE_HIERARCHY = {
    UserRole.EMPLOYEE: 1,
    UserRole.CREW_CHIEF: 2,
    UserRole.COMPANY_USER: 2,
    UserRole.STAFF: 3,
    UserRole.ADMIN: 4,
}

# Roles that can be put on a shift as workers.
ASSIGNABLE_ROLES = frozenset({UserRole.STAFF, UserRole.CREW_CHIEF, UserRole.ADMIN, UserRole.EMPLOYEE})

# Roles that see every company's data.
INTERNAL_ROLES = frozenset({UserRole.STAFF, UserRole.CREW_CHIEF, UserRole.ADMIN, UserRole.EMPLOYEE})


def has_minimum_role(role: UserRole, minimum: UserRole) -> bool:
    return ROLE_HIERARCHY[role] >= ROLE_HIERARCHY[minimum]
