"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_MINUTES = 60 * 24
MIN_PASSWORD_LENGTH = 6

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)

# MySQL server error codes handled by repositories.
MYSQL_ER_DUP_ENTRY = 1062
