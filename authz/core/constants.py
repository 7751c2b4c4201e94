"""Core constants: cache key layout and well-known permission keys."""

# Cache key prefixes
CACHE_PREFIX_PERMISSION = "permission"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Permission gating the administrative catalog/ledger operations.
ADMIN_PERMISSION_KEY = "ROLE_MGMT"
USER_ADMIN_PERMISSION_KEY = "USER_MGMT"

PERMISSION_KEY_MAX_LENGTH = 100
# Upper snake case segments, optionally dotted (USER_MGMT, REPORTS.DEPT_VIEW).
PERMISSION_KEY_PATTERN = r"^[A-Z][A-Z0-9_]*(\.[A-Z0-9_]+)*$"
ROLE_NAME_MAX_LENGTH = 100
USERNAME_MAX_LENGTH = 255
