"""
Session Orchestrator
====================

One orchestration cycle: read the stored tokens, fetch usage, and on an
expired access token refresh it once and retry once.
"""
from __future__ import annotations

import logging

import requests

from .config import Settings
from .errors import ApiError
from .keychain import read_credentials
from .oauth import refresh_access_token
from .usage_api import UsageReport, fetch_usage

logger = logging.getLogger(__name__)


class UsageSession:
    """Runs orchestration cycles against one shared HTTP session."""

    def __init__(self, http: requests.Session, settings: Settings | None = None) -> None:
        self.http = http
        self.settings = settings or Settings()

    def run_cycle(self) -> UsageReport:
        """Return a fresh usage report.

        At most two fetches and one refresh are made per call. Credential store
        errors, refresh errors and any fetch error other than HTTP 401 are
        raised unchanged.
        """
        credentials = read_credentials(self.settings.credential_service)

        try:
            return fetch_usage(self.http, credentials.access_token, self.settings)
        except ApiError as e:
            if not e.is_unauthorized:
                raise
            logger.info('Access token rejected (401), refreshing')

        new_token = refresh_access_token(self.http, credentials.refresh_token, self.settings)
        return fetch_usage(self.http, new_token, self.settings)


__all__ = ['UsageSession']
