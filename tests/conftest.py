"""
Shared fixtures: a scripted requests transport adapter standing in for the
exchange, so the code under test exercises the real requests stack.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from kucoin_rest.client import ApiService
from kucoin_rest.config import ClientConfig
from kucoin_rest.signer import Credentials


TEST_BASE_URL = "https://api.kucoin.test"


class ScriptedAdapter(BaseAdapter):
    """Replays queued responses / exceptions and records every request."""

    def __init__(self):
        super().__init__()
        self._script: List[Any] = []
        self.requests: List[requests.PreparedRequest] = []
        self.send_kwargs: List[Dict[str, Any]] = []

    def queue_json(
        self,
        body: Any,
        status: int = 200,
        headers: Optional[Dict[str, str]] = None
    ) -> "ScriptedAdapter":
        raw = body if isinstance(body, (bytes, str)) else json.dumps(body)
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        self._script.append((status, raw, headers or {}))
        return self

    def queue_success(self, data: Any) -> "ScriptedAdapter":
        return self.queue_json({"code": "200000", "data": data})

    def queue_error(self, exc: Exception) -> "ScriptedAdapter":
        self._script.append(exc)
        return self

    def send(self, request, **kwargs):
        self.requests.append(request)
        self.send_kwargs.append(kwargs)
        if not self._script:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")

        item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item

        status, raw, headers = item
        response = requests.Response()
        response.status_code = status
        response._content = raw
        response.headers = CaseInsensitiveDict({"Content-Type": "application/json", **headers})
        response.url = request.url
        response.request = request
        response.encoding = "utf-8"
        return response

    def close(self):
        pass

    @property
    def pending(self) -> int:
        return len(self._script)


@pytest.fixture
def adapter() -> ScriptedAdapter:
    return ScriptedAdapter()


@pytest.fixture
def session(adapter: ScriptedAdapter) -> requests.Session:
    s = requests.Session()
    s.mount("https://", adapter)
    return s


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        api_key="test-key-0123456789",
        api_secret="test-secret",
        api_passphrase="test-passphrase",
        api_key_version="2",
    )


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def service(session, credentials, sleeps) -> ApiService:
    config = ClientConfig(
        base_url=TEST_BASE_URL,
        credentials=credentials,
        timeout_seconds=5.0,
        max_retries=3,
    )
    svc = ApiService(config, session=session, sleep=sleeps.append)
    yield svc
    svc.close()
