from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests


def make_response(status: int = 200, payload: Any = None, text: str | None = None) -> MagicMock:
    """Build a stand-in for ``requests.Response``."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.ok = status < 400
    if text is None:
        text = json.dumps(payload) if payload is not None else ''
    resp.text = text
    if payload is not None:
        resp.json.return_value = payload
    else:
        resp.json.side_effect = requests.exceptions.JSONDecodeError('Expecting value', text, 0)
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def account(monkeypatch):
    monkeypatch.setenv('USER', 'alice')
    monkeypatch.delenv('USERNAME', raising=False)
    return 'alice'


def stored_secret(access: str = 'A', refresh: str = 'R', **extra: Any) -> str:
    oauth = {'accessToken': access, 'refreshToken': refresh, 'expiresAt': 1760000000000}
    return json.dumps({'claudeAiOauth': oauth, **extra})
