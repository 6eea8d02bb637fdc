"""
Errors — Exception hierarchy for the export pipeline.

Each pipeline phase raises its own error type so the orchestrator can tell a
fatal failure (abort the run, exit non-zero) from a per-item enrichment miss
(record a warning, keep going):

  AuthenticationError   Token request failed (fatal)
  FetchError            User listing or lookup failed (fatal unless per-item)
  LookupMissError       A single role/partner id could not be resolved (skipped)
  ExportWriteError      The CSV file could not be written (fatal)
"""


class ExportError(Exception):
    """Base class for every error raised by the export pipeline."""


class AuthenticationError(ExportError):
    """The client-credentials token request failed."""


class FetchError(ExportError):
    """A request to the identity API or partner service failed.

    Attributes:
        status_code: HTTP status of the failed response, or None for
                     network failures.
    """

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class LookupMissError(FetchError):
    """A single enrichment lookup returned no usable record."""


class ExportWriteError(ExportError):
    """The export file could not be written to disk."""
