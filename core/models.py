"""
Models — Typed records for the identity API responses.

The Management API returns users as loosely-shaped JSON. Free-form bags such
as app_metadata and user_metadata may be missing entirely, so every accessor
here falls back to a safe default instead of raising KeyError.

A user as returned by GET /api/v2/users:
    {
      "user_id": "auth0|64f...",
      "email": "jane@example.com",
      "name": "Jane Doe",
      "created_at": "2023-09-01T12:00:00.000Z",
      "last_login": "2024-01-15T08:30:00.000Z",
      "logins_count": 12,
      "blocked": false,
      "app_metadata": {"role_id": "rol_abc", "academic_partner_id": "ap-1", "uuid": "..."},
      "user_metadata": {"given_name": "Jane", "family_name": "Doe"}
    }
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class AppMetadata:
    role_id: Optional[str] = None
    academic_partner_id: Optional[str] = None
    uuid: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> "AppMetadata":
        data = _as_dict(data)
        return cls(
            role_id=data.get("role_id"),
            academic_partner_id=data.get("academic_partner_id"),
            uuid=data.get("uuid"),
        )


@dataclass(frozen=True)
class UserMetadata:
    given_name: Optional[str] = None
    family_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> "UserMetadata":
        data = _as_dict(data)
        return cls(
            given_name=data.get("given_name"),
            family_name=data.get("family_name"),
        )


@dataclass(frozen=True)
class User:
    """A user record from the identity API. Read-only for this tool."""

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    last_login: Optional[str] = None
    last_password_reset: Optional[str] = None
    logins_count: Optional[int] = None
    blocked: bool = False
    app_metadata: AppMetadata = field(default_factory=AppMetadata)
    user_metadata: UserMetadata = field(default_factory=UserMetadata)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "User":
        data = _as_dict(data)
        return cls(
            user_id=data.get("user_id", ""),
            email=data.get("email"),
            name=data.get("name"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            last_login=data.get("last_login"),
            last_password_reset=data.get("last_password_reset"),
            logins_count=data.get("logins_count"),
            blocked=bool(data.get("blocked", False)),
            app_metadata=AppMetadata.from_api(data.get("app_metadata")),
            user_metadata=UserMetadata.from_api(data.get("user_metadata")),
        )

    @property
    def role_id(self) -> Optional[str]:
        return self.app_metadata.role_id

    @property
    def academic_partner_id(self) -> Optional[str]:
        return self.app_metadata.academic_partner_id


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Role":
        data = _as_dict(data)
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class AcademicPartner:
    id: str
    name: str
    short_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AcademicPartner":
        data = _as_dict(data)
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            short_name=data.get("shortName"),
        )


def distinct_ids(values: Iterable[Optional[str]]) -> List[str]:
    """Deduplicate ids in order of first occurrence, dropping empty values."""
    seen = set()
    result = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
