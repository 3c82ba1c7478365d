"""Exit codes for pluginrepo CLI commands."""

# Success
SUCCESS = 0

# Errors
GENERAL_ERROR = 1
CATALOG_NOT_FOUND = 3
CATALOG_INVALID = 4
VALIDATION_FAILED = 5
