"""
Settings — Default configuration values for the user export.

This module provides the DEFAULT_SETTINGS dict that the orchestrator uses as
fallback values when environment variables are not set. The actual
configuration is loaded from .env at runtime.

Configuration precedence (highest to lowest):
  1. CLI flags (--debug, --role, user type)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  OUTPUT_DIR              Where export CSV files are written (default: ./dumps)
  OUTPUT_RETENTION_DAYS   How many days to keep old exports (0 = keep forever)
  PAGE_SIZE               Users requested per page (Management API maximum: 100)
  REQUESTS_PER_SECOND     Throttle for identity API and partner service calls
  CSV_FIELDSET_VERSION    Exported column set (1, 2 or 3; see core/flattener.py)
  AUTH0_CONNECTION        Database connection the exported users belong to
  REQUEST_TIMEOUT         Seconds before an HTTP request is abandoned
  DEBUG                   Whether to print verbose output
"""

DEFAULT_SETTINGS = {
    "OUTPUT_DIR": "./dumps",
    "OUTPUT_RETENTION_DAYS": 0,
    "PAGE_SIZE": 100,
    "REQUESTS_PER_SECOND": 2,
    "CSV_FIELDSET_VERSION": 3,
    "AUTH0_CONNECTION": "model-m-users",
    "REQUEST_TIMEOUT": 30,
    "DEBUG": False,
}

# User type label -> environment variables holding that type's role ids.
USER_TYPE_ROLE_VARS = {
    "guild": [
        "ROLE_ID_GUILD_SUPER_USER",
        "ROLE_ID_GUILD_ADMIN",
        "ROLE_ID_GUILD_MEMBER",
    ],
    "ap": [
        "ROLE_ID_AP_ADMIN",
        "ROLE_ID_AP_MEMBER",
    ],
}

USER_TYPES = sorted(USER_TYPE_ROLE_VARS)

ALL_USERS_LABEL = "all"
