from .settings import DEFAULT_SETTINGS, USER_TYPE_ROLE_VARS, USER_TYPES, ALL_USERS_LABEL
