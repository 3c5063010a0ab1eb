"""
Credential Store Reader
=======================

Reads the OAuth tokens Claude Code keeps in the platform credential store
(macOS Keychain, Windows Credential Locker, Secret Service) via ``keyring``.

Tokens are read fresh on every call and never written back.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

import keyring
from keyring.errors import KeyringError

from .config import ACCOUNT_ENV_VARS, CREDENTIAL_SERVICE
from .errors import ConfigError, EncodingError, NotSignedInError, ParseError, StoreAccessError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)


def current_account() -> str:
    """Return the account name the credential store entry is filed under.

    Raises
    ------
    ConfigError
        If none of ``USER`` / ``USERNAME`` is set.
    """
    for name in ACCOUNT_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value

    raise ConfigError(f'Could not determine current username from {" or ".join(ACCOUNT_ENV_VARS)} env var')


def _secret_text(secret: str | bytes) -> str:
    try:
        if isinstance(secret, bytes):
            return secret.decode('utf-8')
        secret.encode('utf-8')  # lone surrogates from a lossy backend
        return secret
    except UnicodeError as e:
        raise EncodingError(e) from e


def parse_credentials(text: str) -> Credentials:
    """Extract the OAuth tokens from the stored JSON document.

    Parameters
    ----------
    text : str
        Secret as stored by Claude Code, e.g.
        ``{"claudeAiOauth": {"accessToken": "...", "refreshToken": "...", "expiresAt": ...}}``.

    Returns
    -------
    Credentials
        The access and refresh token. ``expiresAt`` and any other keys are ignored.

    Raises
    ------
    ParseError
        If the document is not JSON, not an object, or the OAuth section is incomplete.
    NotSignedInError
        If the document has no ``claudeAiOauth`` section.
    """
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError('credential store JSON', e) from e

    if not isinstance(data, dict):
        raise ParseError('credential store JSON', 'expected a JSON object')

    oauth = data.get('claudeAiOauth')
    if oauth is None:
        raise NotSignedInError()
    if not isinstance(oauth, dict):
        raise ParseError('credential store JSON', 'claudeAiOauth is not an object')

    tokens = {}
    for key in ('accessToken', 'refreshToken'):
        value = oauth.get(key)
        if not isinstance(value, str):
            raise ParseError('credential store JSON', f'missing or invalid {key}')
        tokens[key] = value

    return Credentials(access_token=tokens['accessToken'], refresh_token=tokens['refreshToken'])


def read_credentials(service: str = CREDENTIAL_SERVICE) -> Credentials:
    """Read and parse the Claude Code OAuth tokens for the current user."""
    account = current_account()

    try:
        secret = keyring.get_password(service, account)
    except KeyringError as e:
        raise StoreAccessError(service, account, e) from e
    if secret is None:
        raise StoreAccessError(service, account, 'no matching entry')

    logger.debug('Read credentials for account %r from %r', account, service)
    return parse_credentials(_secret_text(secret))


__all__ = ['Credentials', 'current_account', 'parse_credentials', 'read_credentials']
