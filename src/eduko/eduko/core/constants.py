"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CSV_DELIMITER = ";"

STUDENT_IMPORT_REQUIRED_COLUMNS = ("username", "password", "first_name", "last_name", "date_of_birth")

# student_id;date_from;date_to;submission_type[;reason]
EXCUSE_IMPORT_MIN_COLUMNS = 4

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_UPLOAD_DIR = "./uploads"
UPLOAD_NAME_TOKEN_LENGTH = 8

DEFAULT_ACCESS_TOKEN_HOURS = 24

# MySQL ER_DUP_ENTRY
MYSQL_DUPLICATE_KEY_ERRNO = 1062
