"""
Core package — The export pipeline modules.

This package contains all the modules that implement the 6-step export
pipeline. Each module handles one concern:

  orchestrator.py        Pipeline coordination (Steps 1-6)
  auth_client.py         Client-credentials token requests (Steps 1, 4)
  management_client.py   HTTP communication with the Auth0 Management API (Steps 1-3)
  partner_client.py      GraphQL lookups against the partner service (Step 4)
  graphql_queries.py     GraphQL query definitions (Step 4)
  pagination.py          Page/total-count pagination (Step 2)
  rate_limiter.py        Fixed-interval throttle for every upstream request
  models.py              Typed user, role and partner records
  enrichment.py          Role and partner name resolution (Steps 3-4)
  flattener.py           Versioned CSV projection (Step 5)
  output_manager.py      Timestamped CSV files and retention cleanup (Step 6)
  errors.py              Exception hierarchy
"""

from .orchestrator import ExportOrchestrator, build_user_query
from .auth_client import ClientCredentialsAuth
from .management_client import ManagementClient
from .partner_client import PartnerClient
from .graphql_queries import ACADEMIC_PARTNER_QUERY
from .pagination import fetch_all_pages
from .rate_limiter import RateLimiter
from .models import User, Role, AcademicPartner, distinct_ids
from .enrichment import EnrichmentResolver
from .flattener import FIELDSETS, flatten_user, flatten_users
from .output_manager import OutputManager
from .errors import (
    ExportError,
    AuthenticationError,
    FetchError,
    LookupMissError,
    ExportWriteError,
)
