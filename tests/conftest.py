import json
from typing import Callable

import httpx
import pytest


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"content-type": "application/json"})


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by *handler*."""

    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)

    return _make
