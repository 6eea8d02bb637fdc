"""
Flattener — Projects enriched users onto a flat, ordered CSV field list.

The exported field list has grown over time, so it is versioned. Older
versions stay available for consumers that still expect the narrower file:

  v1  identity and login fields plus role_id
  v2  v1 + blocked, uuid, role_name
  v3  v2 + academic_partner_id, academic_partner_name (requires partner lookups)

Missing values are written as empty strings.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import AcademicPartner, Role, User

FIELDSET_V1 = [
    "created_at",
    "email",
    "family_name",
    "given_name",
    "last_login",
    "last_password_reset",
    "logins_count",
    "name",
    "role_id",
    "user_id",
]

FIELDSET_V2 = FIELDSET_V1 + ["blocked", "uuid", "role_name"]

FIELDSET_V3 = FIELDSET_V2 + ["academic_partner_id", "academic_partner_name"]

FIELDSETS = {1: FIELDSET_V1, 2: FIELDSET_V2, 3: FIELDSET_V3}

LATEST_FIELDSET_VERSION = max(FIELDSETS)


def get_fieldset(version: int) -> List[str]:
    if version not in FIELDSETS:
        raise ValueError(
            f"Unknown CSV fieldset version {version}, expected one of {sorted(FIELDSETS)}"
        )
    return FIELDSETS[version]


def _value(value) -> str:
    if value is None:
        return ""
    return value


def flatten_user(
    user: User,
    roles: Mapping[str, Role],
    partners: Optional[Mapping[str, AcademicPartner]] = None,
    version: int = LATEST_FIELDSET_VERSION,
) -> Tuple[Dict[str, object], List[str]]:
    """Flatten one user.

    Returns:
        (row, misses) where row maps each fieldset column to its value and
        misses lists human-readable notes for role/partner ids that did not
        resolve. A missing name is written as an empty string.
    """
    partners = partners or {}
    fields = get_fieldset(version)
    misses = []

    role_name = ""
    if user.role_id:
        role = roles.get(user.role_id)
        if role is not None:
            role_name = role.name
        elif "role_name" in fields:
            misses.append(f"user {user.user_id}: role {user.role_id} not resolved")

    partner_name = ""
    if user.academic_partner_id:
        partner = partners.get(user.academic_partner_id)
        if partner is not None:
            partner_name = partner.name
        elif "academic_partner_name" in fields:
            misses.append(
                f"user {user.user_id}: academic partner {user.academic_partner_id} not resolved"
            )

    values = {
        "created_at": user.created_at,
        "email": user.email,
        "family_name": user.user_metadata.family_name,
        "given_name": user.user_metadata.given_name,
        "last_login": user.last_login,
        "last_password_reset": user.last_password_reset,
        "logins_count": user.logins_count,
        "name": user.name,
        "role_id": user.role_id,
        "user_id": user.user_id,
        "blocked": user.blocked,
        "uuid": user.app_metadata.uuid,
        "role_name": role_name,
        "academic_partner_id": user.academic_partner_id,
        "academic_partner_name": partner_name,
    }

    row = {name: _value(values[name]) for name in fields}
    return row, misses


def flatten_users(
    users: Iterable[User],
    roles: Mapping[str, Role],
    partners: Optional[Mapping[str, AcademicPartner]] = None,
    version: int = LATEST_FIELDSET_VERSION,
) -> Tuple[List[Dict[str, object]], List[str]]:
    """Flatten every user, preserving input order."""
    rows = []
    misses = []
    for user in users:
        row, user_misses = flatten_user(user, roles, partners, version)
        rows.append(row)
        misses.extend(user_misses)
    return rows, misses
