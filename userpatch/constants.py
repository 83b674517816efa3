"""
Shared constants for the user resource.
"""

# Allowed values for User.role
ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLE_GUEST = "guest"

USER_ROLES = (ROLE_ADMIN, ROLE_USER, ROLE_GUEST)
DEFAULT_ROLE = ROLE_USER

# Column limits, shared by the ORM model and the request schemas
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 20
ROLE_MAX_LENGTH = 20
BIO_MAX_LENGTH = 500

# Set at creation and never touched by PUT or PATCH
IMMUTABLE_USER_FIELDS = frozenset({"id", "email"})
