"""
Enrichment Resolver — Resolves role and partner ids to display names.

Only ids actually observed among the fetched users are looked up, each
exactly once, in order of first occurrence. Lookups are sequential; the
clients' rate limiters space them out.

A lookup that misses (unknown id, envelope errors, per-item HTTP failure) is
skipped: a warning is recorded and resolution continues with the next id.
Authentication failures are not per-item and propagate.
"""

from typing import Dict, Iterable, List, Optional

from .errors import FetchError
from .management_client import ManagementClient
from .models import AcademicPartner, Role, User, distinct_ids
from .partner_client import PartnerClient


class EnrichmentResolver:
    """Resolves distinct role and partner ids for a set of users.

    Attributes:
        warnings: Messages for every id that could not be resolved.
    """

    def __init__(
        self,
        management: ManagementClient,
        partners: Optional[PartnerClient] = None,
        debug: bool = False,
    ):
        self._management = management
        self._partners = partners
        self.debug = debug
        self.warnings: List[str] = []

    def resolve_roles(self, role_ids: Iterable[str]) -> Dict[str, Role]:
        """Look up each distinct role id once.

        Returns:
            Mapping of role id -> Role for every id that resolved.
        """
        roles = {}
        for role_id in distinct_ids(role_ids):
            try:
                roles[role_id] = Role.from_api(self._management.get_role(role_id))
            except FetchError as e:
                self._warn(f"Role {role_id} could not be resolved: {e}")
        return roles

    def resolve_partners(self, partner_ids: Iterable[str]) -> Dict[str, AcademicPartner]:
        """Look up each distinct academic partner id once.

        Returns:
            Mapping of partner id -> AcademicPartner for every id that resolved.
        """
        if self._partners is None:
            raise RuntimeError("Partner resolution requires a PartnerClient")

        partners = {}
        for partner_id in distinct_ids(partner_ids):
            try:
                partners[partner_id] = AcademicPartner.from_api(
                    self._partners.get_academic_partner(partner_id)
                )
            except FetchError as e:
                self._warn(f"Academic partner {partner_id} could not be resolved: {e}")
        return partners

    def resolve_roles_for(self, users: Iterable[User]) -> Dict[str, Role]:
        return self.resolve_roles(u.role_id for u in users)

    def _warn(self, message: str):
        self.warnings.append(message)
        print(f"  Warning: {message}")
