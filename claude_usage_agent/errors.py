"""
Errors
======

Exception hierarchy shared by every component of the agent.

Each error keeps the structured context it was raised with (status code,
response body, underlying cause) so callers can branch on the type instead
of parsing messages.
"""
from __future__ import annotations


class UsageAgentError(Exception):
    """Base class for all errors raised by the agent."""


class ConfigError(UsageAgentError):
    """The execution environment lacks something the agent needs."""


class StoreAccessError(UsageAgentError):
    """The platform credential store could not return the secret.

    Covers both "not found" and "access denied", which the store does not
    distinguish.
    """

    def __init__(self, service: str, account: str, cause: BaseException | str) -> None:
        self.service = service
        self.account = account
        self.cause = cause
        super().__init__(f'Failed to read credential store (service={service!r}, account={account!r}): {cause}')


class EncodingError(UsageAgentError):
    """The stored secret is not valid UTF-8."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f'Invalid UTF-8 in credential store: {cause}')


class ParseError(UsageAgentError):
    """A JSON document at one of the agent's boundaries was malformed."""

    def __init__(self, source: str, cause: BaseException | str) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f'Failed to parse {source}: {cause}')


class NotSignedInError(UsageAgentError):
    """The credential store entry has no OAuth section."""

    def __init__(self) -> None:
        super().__init__('No claudeAiOauth found in stored credentials. Is Claude Code signed in?')


class NetworkError(UsageAgentError):
    """The request never produced an HTTP response."""

    def __init__(self, source: str, cause: BaseException) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f'{source} request failed: {cause}')


class HttpStatusError(UsageAgentError):
    """A non-2xx HTTP response, kept verbatim for diagnostics."""

    label = 'HTTP error'

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f'{self.label} ({status}): {body}')


class AuthServerError(HttpStatusError):
    """The token endpoint rejected a refresh request."""

    label = 'Token refresh failed'


class ApiError(HttpStatusError):
    """The usage endpoint answered with a non-2xx status."""

    label = 'Usage API error'

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401


__all__ = [
    'ApiError',
    'AuthServerError',
    'ConfigError',
    'EncodingError',
    'HttpStatusError',
    'NetworkError',
    'NotSignedInError',
    'ParseError',
    'StoreAccessError',
    'UsageAgentError',
]
