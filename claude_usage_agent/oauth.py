"""
Token Refresher
===============

Exchanges a refresh token for a new access token at the Anthropic OAuth
token endpoint.
"""
from __future__ import annotations

import logging

import requests

from .config import Settings
from .errors import AuthServerError, NetworkError, ParseError

logger = logging.getLogger(__name__)


def refresh_access_token(http: requests.Session, refresh_token: str, settings: Settings | None = None) -> str:
    """Return a fresh access token for *refresh_token*.

    Only the access token is returned. A rotated refresh token in the response
    is ignored, so callers must not call this more than once per failed request.

    Raises
    ------
    NetworkError
        If the request did not produce a response.
    AuthServerError
        If the token endpoint answered with a non-2xx status.
    ParseError
        If the response body is not a JSON object with an ``access_token``.
    """
    settings = settings or Settings()
    form = {
        'grant_type': 'refresh_token',
        'client_id': settings.client_id,
        'refresh_token': refresh_token,
    }

    try:
        resp = http.post(
            settings.token_url,
            data=form,
            headers={'User-Agent': settings.user_agent},
            timeout=settings.request_timeout,
        )
    except requests.RequestException as e:
        raise NetworkError('Token refresh', e) from e

    if not 200 <= resp.status_code < 300:
        raise AuthServerError(resp.status_code, resp.text)

    try:
        payload = resp.json()
    except ValueError as e:
        raise ParseError('token response', e) from e

    token = payload.get('access_token') if isinstance(payload, dict) else None
    if not isinstance(token, str):
        raise ParseError('token response', 'missing access_token')

    logger.info('Access token refreshed')
    return token


__all__ = ['refresh_access_token']
